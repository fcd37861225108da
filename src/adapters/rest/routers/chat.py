"""Chat endpoint: one user message in, one agent reply out."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from adapters.rest.dependencies import AgentSessions, ConversationOwnershipError, get_sessions
from adapters.rest.schemas import ChatBody, ChatOut
from domain.exceptions import ConfigurationError

router = APIRouter(prefix="/api", tags=["chat"])
logger = logging.getLogger(__name__)


@router.post("/chat", response_model=ChatOut)
async def chat(
    body: ChatBody,
    sessions: AgentSessions = Depends(get_sessions),
):
    try:
        agent = sessions.get_or_create(
            body.user_id,
            conversation_id=body.conversation_id,
            document_ids=body.document_ids,
            variant=body.variant,
        )
    except ConversationOwnershipError:
        raise HTTPException(status_code=403, detail="Not your conversation.")
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("REST user=%s conv=%s | %s", body.user_id, agent.ctx.conversation_id, body.message[:200])
    reply = await agent.run(body.message)
    return ChatOut(reply=reply, conversation_id=agent.ctx.conversation_id)
