"""
Shared fakes for the test suite.

Nothing here touches the network, an LLM, or an embedding model: the
integrations backend, credential signer, vector store and chat model are
all replaced by in-memory doubles that record how they were called.
"""
import os
import sys
from pathlib import Path
from typing import Any, Optional

import pytest
from langchain_core.documents import Document
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from langchain_core.utils.function_calling import convert_to_openai_tool
from pydantic import Field

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from application.context import CallerContext, SessionContext
from application.drafts import DraftStore
from infrastructure.config import Settings
from infrastructure.rag.document_index import QueryEngine
from infrastructure.rag.filters import PermissionFilter


TEAM = {
    "members": [
        {"gid": "1201", "name": "Ana"},
        {"gid": "1202", "name": "Bo Chen"},
    ]
}


class FakeGateway:
    """Records every integration call; answers from a per-method table."""

    def __init__(self, responses: Optional[dict[str, Any]] = None, raises: Optional[Exception] = None):
        self.calls: list[tuple[str, Any, str]] = []
        self.responses = {
            "send_slack": {"status": True},
            "create_salesforce_contact": {"status": 200},
            "create_salesforce_opportunity": {"status": "200"},
            "attach_salesforce_task": {"status": 201},
            "get_asana_team": TEAM,
            "create_asana_task": {"status": "success"},
            "get_google_calendar_availability": {
                "busy": [{"start": "2024-01-15T18:00:00Z", "end": "2024-01-15T19:00:00Z"}],
            },
            "create_google_calendar_event": {"status": True},
            "create_notion_page": {"status": "ok"},
        }
        self.responses.update(responses or {})
        self.raises = raises

    def _record(self, method: str, payload: Any, token: str) -> Any:
        self.calls.append((method, payload, token))
        if self.raises is not None:
            raise self.raises
        return self.responses[method]

    def calls_to(self, method: str) -> list[tuple[str, Any, str]]:
        return [c for c in self.calls if c[0] == method]

    async def send_slack(self, message, token):
        return self._record("send_slack", message, token)

    async def create_salesforce_contact(self, payload, token):
        return self._record("create_salesforce_contact", payload, token)

    async def create_salesforce_opportunity(self, payload, token):
        return self._record("create_salesforce_opportunity", payload, token)

    async def attach_salesforce_task(self, payload, token):
        return self._record("attach_salesforce_task", payload, token)

    async def get_asana_team(self, token):
        return self._record("get_asana_team", None, token)

    async def create_asana_task(self, payload, token):
        return self._record("create_asana_task", payload, token)

    async def get_google_calendar_availability(self, token):
        return self._record("get_google_calendar_availability", None, token)

    async def create_google_calendar_event(self, payload, token):
        return self._record("create_google_calendar_event", payload, token)

    async def create_notion_page(self, payload, token):
        return self._record("create_notion_page", payload, token)


class FakeSigner:
    def __init__(self):
        self.signed: list[str] = []

    def sign(self, user_id: str) -> str:
        self.signed.append(user_id)
        return f"token-for-{user_id}"


class FakeVectorStore:
    """Duck-typed stand-in for a LangChain vector store: returns docs in stored order."""

    def __init__(self, documents: list[Document]):
        self.documents = documents
        self.requests: list[tuple[str, int]] = []

    def similarity_search_with_score(self, query: str, k: int = 4):
        self.requests.append((query, k))
        return [(doc, 0.1 * i) for i, doc in enumerate(self.documents[:k])]


class FakeIndex:
    def __init__(self, vectorstore=None):
        self.vectorstore = vectorstore
        self.engines: list[QueryEngine] = []

    def as_query_engine(self, similarity_top_k: int, pre_filters: PermissionFilter) -> QueryEngine:
        engine = QueryEngine(self.vectorstore, similarity_top_k, pre_filters)
        self.engines.append(engine)
        return engine


class FakeChatModel(BaseChatModel):
    """Scripted chat model: bind_tools() records the schemas, each call replays the next reply."""

    replies: list[Any] = Field(default_factory=list)
    default: str = "Done."
    bound_tools: Optional[list[dict]] = None
    seen: list[list] = Field(default_factory=list)

    def __init__(self, replies: Optional[list] = None, default: str = "Done.", **kwargs):
        super().__init__(replies=list(replies or []), default=default, **kwargs)

    
    def _llm_type(self) -> str:
        return "scripted"

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = [convert_to_openai_tool(t) for t in tools]
        return self

    def _reply(self, messages) -> ChatResult:
        self.seen.append(list(messages))
        if self.replies:
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
        else:
            reply = AIMessage(content=self.default)
        return ChatResult(generations=[ChatGeneration(message=reply)])

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        return self._reply(messages)

    async def _agenerate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        return self._reply(messages)


def doc(text: str, doc_id: str, private: bool = False) -> Document:
    return Document(page_content=text, metadata={"doc_id": doc_id, "private": "true" if private else "false"})


def make_ctx(user_id: str = "alice", ttl: float = 900) -> SessionContext:
    return SessionContext(
        caller=CallerContext(user_id=user_id),
        conversation_id="test-conversation",
        drafts=DraftStore(ttl_seconds=ttl),
    )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def ctx():
    return make_ctx()


@pytest.fixture
def settings(tmp_path: Path):
    return Settings(
        project_root=tmp_path,
        data_dir=tmp_path / "data",
        vectorstore_path=tmp_path / "vectorstore",
    )


@pytest.fixture
def corpus():
    return FakeVectorStore([
        doc("Public pricing overview", "pricing"),
        doc("Acme contract renewal terms", "d1", private=True),
        doc("Globex onboarding notes", "d2", private=True),
        doc("Initech security review", "d3", private=True),
        doc("Acme contract signatories", "d1", private=True),
        doc("Globex escalation contacts", "d2", private=True),
        doc("Public refund policy", "refunds"),
    ])
