"""
agent.tools.registry - Tool registration, discovery, and invocation.

Central registry that holds one agent's tools and is the single boundary
between the dispatch loop and tool code: arguments are validated here
before a tool runs, and every error a tool raises is turned into a
Failure outcome here. Nothing raised by a tool reaches the loop.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from langchain_core.tools import StructuredTool
from pydantic import ValidationError

from application.context import SessionContext
from agent.tools.base import BaseTool
from domain.exceptions import ToolSpecError
from domain.models import Outcome, ToolSpec

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Manages tool registration and invocation."""

    def __init__(self):
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool by its name. Names are unique within an agent."""
        if tool.name in self._tools:
            raise ToolSpecError(f"Tool '{tool.name}' already registered")
        self._tools[tool.name] = tool
        logger.debug("Registered tool: %s", tool.name)

    def get(self, name: str) -> BaseTool:
        """Get a tool by name."""
        if name not in self._tools:
            raise KeyError(f"Tool '{name}' not registered")
        return self._tools[name]

    def all(self) -> list[BaseTool]:
        """Return all registered tools."""
        return list(self._tools.values())

    def names(self) -> list[str]:
        """Return all registered tool names."""
        return list(self._tools.keys())

    def specs(self) -> list[ToolSpec]:
        return [tool.spec for tool in self._tools.values()]

    def to_function_schemas(self) -> list[dict[str, Any]]:
        """Tool schemas in the OpenAI function-calling format."""
        return [
            {"type": "function", "function": spec.to_function_schema()}
            for spec in self.specs()
        ]

    def to_langchain_tools(self, ctx: SessionContext) -> list[StructuredTool]:
        """Convert all registered tools to LangChain StructuredTools bound to ctx.

        The rendered function schema is passed as args_schema, so the model
        sees it unchanged and LangChain does no validation of its own. Every
        call lands in invoke(), and the outcome text is the observation.
        """
        lc_tools = []
        for spec in self.specs():

            def _make_coroutine(name: str, context: SessionContext):
                async def coroutine(**kwargs: Any) -> str:
                    outcome = await self.invoke(name, context, kwargs)
                    return outcome.text
                return coroutine

            lc_tools.append(StructuredTool.from_function(
                coroutine=_make_coroutine(spec.name, ctx),
                name=spec.name,
                description=spec.description,
                args_schema=spec.to_function_schema()["parameters"],
            ))
        return lc_tools

    async def invoke(
        self,
        name: str,
        ctx: SessionContext,
        arguments: Optional[dict[str, Any]] = None,
    ) -> Outcome:
        """Validate arguments, run the tool, and return its outcome.

        Returns a Failure (never raises) for unknown tools, invalid
        arguments, and any error inside the tool.
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning("Model requested unknown tool '%s'", name)
            return Outcome.failure(f"Unknown tool '{name}'.")

        try:
            validated = tool.get_schema().model_validate(arguments or {})
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            logger.warning("Rejected call to %s: %s", name, problems)
            return Outcome.failure(f"Invalid arguments for {name}: {problems}")

        try:
            outcome = await tool.execute(ctx, **validated.model_dump())
        except Exception:
            logger.exception(
                "Tool '%s' failed (user=%s, request=%s)", name, ctx.user_id, ctx.request_id,
            )
            return Outcome.failure(f"The {name} tool could not complete the request.")

        logger.info("Tool '%s' finished: %s", name, outcome.kind.value)
        return outcome
