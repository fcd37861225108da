"""
agent.tools.retrieval - Knowledge lookup exposed as a tool.

Wraps a query engine built once, at agent construction, with that agent's
permission filter and top-K. Lookups go through the same registry path as
the action tools, so a retrieval error becomes an ordinary Failure.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from application.context import SessionContext
from agent.tools.base import BaseTool
from domain.models import Outcome, Passage
from domain.ports import QueryEnginePort

logger = logging.getLogger(__name__)

QUERY_ENGINE_TOOL_NAME = "queryEngineTool"
NO_RESULTS = "No relevant information found."


class QueryInput(BaseModel):
    query: str = Field(description="The question or search text to look up in the knowledge base")


class RetrievalTool(BaseTool):
    """Look up passages in the document index."""

    name = QUERY_ENGINE_TOOL_NAME

    def __init__(self, query_engine: QueryEnginePort, description: str):
        self._engine = query_engine
        self.description = description

    @property
    def query_engine(self) -> QueryEnginePort:
        return self._engine

    def get_schema(self) -> type[BaseModel]:
        return QueryInput

    async def execute(self, ctx: SessionContext, query: str = "", **kwargs) -> Outcome:
        passages = await self._engine.query(query)
        logger.info("Knowledge lookup returned %d passage(s)", len(passages))
        if not passages:
            return Outcome.success(NO_RESULTS)
        return Outcome.success(format_passages(passages))


def format_passages(passages: list[Passage]) -> str:
    blocks = []
    for i, p in enumerate(passages, start=1):
        source = f" (source: {p.doc_id})" if p.doc_id else ""
        blocks.append(f"[{i}]{source}\n{p.text.strip()}")
    return "\n\n".join(blocks)
