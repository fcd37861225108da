"""
factory - Composition root for the business action assistant.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (CLI, REST) call this factory to get fully
configured agents.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    await factory.initialize()  # one-time startup

    agent = factory.create_agent("user-42", document_ids=["doc-1"])
    response = await agent.run("Draft a Slack message to the team about the launch")

Every create_agent() call builds a fresh tool set, draft store and memory
bound to the given identity and document scope. Nothing is cached or
pooled between agents.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional
from uuid import uuid4

from langchain_core.language_models import BaseChatModel

from application.context import CallerContext, Identity, SessionContext
from application.drafts import DraftStore
from domain.exceptions import ConfigurationError
from domain.ports import CredentialSignerPort, DocumentIndexPort, IntegrationGatewayPort
from infrastructure.auth.jwt_signer import JwtSigner
from infrastructure.config import AGENT_VARIANTS, Settings
from infrastructure.integrations.gateway import HttpIntegrationGateway
from infrastructure.llm.llm_builder import build_agent_llm
from infrastructure.rag.document_index import get_data_source
from infrastructure.rag.filters import generate_filters
from agent.executor import AgentExecutor
from agent.memory import ConversationMemory
from agent.prompt import build_system_prompt
from agent.tools.asana import ConfirmAndCreateAsanaTaskTool, DraftAsanaTaskTool, GetAsanaMemberIdTool
from agent.tools.calendar import ConvertUtcDatetimeToPstDatetimeTool, CreateMeetingTool, GetSdrScheduleTool
from agent.tools.notion import CreateNotionPageTool
from agent.tools.registry import ToolRegistry
from agent.tools.retrieval import RetrievalTool
from agent.tools.salesforce import (
    ConfirmAndCreateSalesforceContactTool,
    ConfirmAndCreateSalesforceOpportunityTool,
    CreateSalesforceTaskTool,
    DraftSalesforceContactTool,
    DraftSalesforceOpportunityTool,
)
from agent.tools.slack import (
    ConfirmAndSendSlackMessageTool,
    DraftSlackMessageTool,
    SendSlackMeetingNotificationTool,
)
from agent.tools.transcript import SummarizeTranscriptTool

logger = logging.getLogger(__name__)

CUSTOMER_SERVICE = "customer_service"
DEFAULT = "default"

# Retrieval tool descriptions per variant (prompt content, kept verbatim).
RETRIEVAL_DESCRIPTIONS = {
    CUSTOMER_SERVICE: "Look up user queries for relevant information",
    DEFAULT: "query engine to pinecone database",
}


class ServiceFactory:
    """Composition root: wires all dependencies together.

    Call initialize() once at startup, then create agents as needed.
    Gateway, signer, index and LLM can be injected (tests, alternative
    backends); anything not injected is built from settings.
    """

    def __init__(
        self,
        config: Settings,
        *,
        gateway: Optional[IntegrationGatewayPort] = None,
        signer: Optional[CredentialSignerPort] = None,
        index: Optional[DocumentIndexPort] = None,
        llm: Optional[BaseChatModel] = None,
    ):
        self._config = config
        self._gateway = gateway
        self._signer = signer
        self._index = index
        self._llm = llm
        self._initialized = index is not None

    @property
    def config(self) -> Settings:
        return self._config

    async def initialize(self, force_rebuild: bool = False) -> None:
        """One-time startup: load or build the document index.

        Must be called before creating agents unless an index was injected.
        """
        if self._initialized and not force_rebuild:
            return
        logger.info("Initializing ServiceFactory...")
        loop = asyncio.get_event_loop()
        self._index = await loop.run_in_executor(
            None, get_data_source, self._config, force_rebuild,
        )
        self._initialized = True
        logger.info("ServiceFactory ready")

    @property
    def index(self) -> DocumentIndexPort:
        self._ensure_initialized()
        return self._index

    # ------------------------------------------------------------------
    # Agent assembly
    # ------------------------------------------------------------------

    def create_agent(
        self,
        identity: Identity,
        document_ids: Optional[Iterable[str]] = None,
        variant: Optional[str] = None,
        conversation_id: Optional[str] = None,
    ) -> AgentExecutor:
        """Create a fully configured AgentExecutor for one conversation.

        Args:
            identity:        User id, or a zero-argument provider of one
                             (evaluated exactly once, here).
            document_ids:    Document scope for retrieval.
            variant:         "default" or "customer_service"; settings decide when omitted.
            conversation_id: Optional id to correlate logs and REST sessions.

        Returns:
            AgentExecutor with its own tools, drafts and memory.
        """
        variant = self._resolve_variant(variant)
        ctx = SessionContext(
            caller=CallerContext.from_identity(identity),
            conversation_id=conversation_id or uuid4().hex,
            drafts=DraftStore(ttl_seconds=self._config.draft_ttl_seconds),
        )
        registry = self.build_registry(variant, document_ids)

        logger.info(
            "Creating %s agent for user %s (%d tools, conversation=%s)",
            variant, ctx.user_id, len(registry.names()), ctx.conversation_id,
        )
        return AgentExecutor(
            llm=self._get_llm(),
            tools=registry,
            ctx=ctx,
            memory=ConversationMemory(max_messages=self._config.memory_max_messages),
            system_prompt=build_system_prompt(registry),
            max_iterations=self._config.agent_max_iterations,
        )

    def create_customer_service_agent(
        self, identity: Identity, document_ids: Optional[Iterable[str]] = None,
    ) -> AgentExecutor:
        return self.create_agent(identity, document_ids, variant=CUSTOMER_SERVICE)

    def create_default_agent(
        self, identity: Identity, document_ids: Optional[Iterable[str]] = None,
    ) -> AgentExecutor:
        return self.create_agent(identity, document_ids, variant=DEFAULT)

    def build_registry(
        self,
        variant: str,
        document_ids: Optional[Iterable[str]] = None,
    ) -> ToolRegistry:
        """Build a fresh tool set for one agent."""
        variant = self._resolve_variant(variant)
        registry = ToolRegistry()

        if variant == DEFAULT:
            gateway = self._get_gateway()
            signer = self._get_signer()
            require_draft = self._config.require_drafts

            registry.register(SummarizeTranscriptTool())
            registry.register(DraftSlackMessageTool())
            registry.register(ConfirmAndSendSlackMessageTool(gateway, signer, require_draft))
            registry.register(DraftSalesforceContactTool())
            registry.register(ConfirmAndCreateSalesforceContactTool(gateway, signer, require_draft))
            registry.register(DraftSalesforceOpportunityTool())
            registry.register(ConfirmAndCreateSalesforceOpportunityTool(gateway, signer, require_draft))
            registry.register(DraftAsanaTaskTool(gateway, signer))
            registry.register(ConfirmAndCreateAsanaTaskTool(gateway, signer, require_draft))
            registry.register(GetAsanaMemberIdTool(gateway, signer))
            registry.register(GetSdrScheduleTool(gateway, signer))
            registry.register(ConvertUtcDatetimeToPstDatetimeTool())
            registry.register(CreateMeetingTool(gateway, signer))
            registry.register(SendSlackMeetingNotificationTool(gateway, signer))
            registry.register(CreateSalesforceTaskTool(gateway, signer))
            registry.register(CreateNotionPageTool(gateway, signer))

        registry.register(self._build_retrieval_tool(variant, document_ids))
        return registry

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_retrieval_tool(
        self, variant: str, document_ids: Optional[Iterable[str]],
    ) -> RetrievalTool:
        query_engine = self.index.as_query_engine(
            similarity_top_k=self._config.top_k,
            pre_filters=generate_filters(document_ids),
        )
        return RetrievalTool(query_engine, description=RETRIEVAL_DESCRIPTIONS[variant])

    def _resolve_variant(self, variant: Optional[str]) -> str:
        variant = (variant or self._config.agent_variant).strip().lower()
        if variant not in AGENT_VARIANTS:
            raise ConfigurationError(
                f"Unknown agent variant '{variant}'. Must be one of: {', '.join(AGENT_VARIANTS)}"
            )
        return variant

    def _get_gateway(self) -> IntegrationGatewayPort:
        if self._gateway is None:
            self._gateway = HttpIntegrationGateway(self._config.integrations_base_url)
        return self._gateway

    def _get_signer(self) -> CredentialSignerPort:
        if self._signer is None:
            self._signer = JwtSigner(
                secret=self._config.jwt_secret,
                algorithm=self._config.jwt_algorithm,
                expiry_seconds=self._config.jwt_expiry_seconds,
            )
        return self._signer

    def _get_llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = build_agent_llm(self._config)
        return self._llm

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "ServiceFactory not initialized. Call await factory.initialize() first."
            )
