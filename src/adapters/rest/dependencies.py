"""
Shared FastAPI dependencies.

- get_factory(): returns the initialized ServiceFactory (set at startup).
- get_sessions(): the in-process registry of live conversations.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Iterable, Optional
from uuid import uuid4

from agent.executor import AgentExecutor
from factory import ServiceFactory

logger = logging.getLogger(__name__)

# Module-level references set by app lifespan
_factory: ServiceFactory | None = None
_sessions: AgentSessions | None = None


class ConversationOwnershipError(Exception):
    """A conversation id was reused by a different user."""


class AgentSessions:
    """Live agents keyed by conversation id, in process memory only.

    An agent's identity, document scope and variant are fixed when the
    conversation starts; later messages reuse its drafts and memory.
    The oldest conversation is dropped once max_conversations is reached.
    """

    def __init__(self, factory: ServiceFactory, max_conversations: int = 1000):
        self._factory = factory
        self._max = max_conversations
        self._agents: OrderedDict[str, AgentExecutor] = OrderedDict()

    def get_or_create(
        self,
        user_id: str,
        conversation_id: Optional[str] = None,
        document_ids: Optional[Iterable[str]] = None,
        variant: Optional[str] = None,
    ) -> AgentExecutor:
        if conversation_id and conversation_id in self._agents:
            agent = self._agents[conversation_id]
            if agent.ctx.user_id != user_id:
                raise ConversationOwnershipError(conversation_id)
            self._agents.move_to_end(conversation_id)
            return agent

        conversation_id = conversation_id or uuid4().hex
        agent = self._factory.create_agent(
            user_id,
            document_ids=document_ids,
            variant=variant,
            conversation_id=conversation_id,
        )
        self._agents[conversation_id] = agent
        if len(self._agents) > self._max:
            evicted, _ = self._agents.popitem(last=False)
            logger.info("Evicted conversation %s", evicted)
        return agent

    def __len__(self) -> int:
        return len(self._agents)


def set_factory(factory: ServiceFactory) -> None:
    global _factory, _sessions
    _factory = factory
    _sessions = AgentSessions(factory)


def get_factory() -> ServiceFactory:
    if _factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return _factory


def get_sessions() -> AgentSessions:
    if _sessions is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return _sessions
