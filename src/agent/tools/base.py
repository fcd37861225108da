"""
agent.tools.base - Base tool interfaces.

All agent tools inherit from BaseTool and return an Outcome. Tools that
reach an external service inherit from ActionTool, which signs a fresh
credential for the caller on every call.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel

from application.context import SessionContext
from domain.models import Outcome, ToolSpec
from domain.ports import CredentialSignerPort, IntegrationGatewayPort

logger = logging.getLogger(__name__)

_SUCCESS_STATUSES = {"200", "201", "ok", "success", "true"}


class BaseTool(ABC):
    """Abstract base for all agent tools."""

    name: str
    description: str
    # Required parameters listed ahead of field order in the rendered schema.
    required_first: tuple[str, ...] = ()

    _spec: Optional[ToolSpec] = None

    @abstractmethod
    async def execute(self, ctx: SessionContext, **kwargs) -> Outcome:
        """Execute the tool with the given session context and validated arguments."""
        ...

    @abstractmethod
    def get_schema(self) -> type[BaseModel]:
        """Return the Pydantic schema for this tool's input arguments."""
        ...

    @property
    def spec(self) -> ToolSpec:
        if self._spec is None:
            self._spec = ToolSpec.from_model(
                self.name, self.description, self.get_schema(), self.required_first,
            )
        return self._spec


class ActionTool(BaseTool):
    """A tool that performs exactly one call on the integrations backend."""

    def __init__(self, gateway: IntegrationGatewayPort, signer: CredentialSignerPort):
        self._gateway = gateway
        self._signer = signer

    def _token(self, ctx: SessionContext) -> str:
        """Sign a credential for this call. Never cached."""
        return self._signer.sign(ctx.caller.user_id)

    def _log_arguments(self, **arguments: Any) -> None:
        """Best-effort argument logging; must never affect the outcome."""
        try:
            rendered = ", ".join(
                f"{k}={_one_line(v)!r}" for k, v in arguments.items()
            )
            logger.info("%s called with %s", self.name, rendered)
        except Exception:
            logger.debug("Could not log arguments for %s", self.name, exc_info=True)


def succeeded(response: Any) -> bool:
    """Whether an integration response reports success.

    Backends disagree on the shape of success: some return a boolean
    status, some an HTTP-like code as int or string.
    """
    if not isinstance(response, dict):
        return False
    status = response.get("status")
    if isinstance(status, bool):
        return status
    if status is None:
        return False
    return str(status).strip().lower() in _SUCCESS_STATUSES


def upstream_error(response: Any, fallback: str) -> str:
    """Return the upstream error payload verbatim, or the fixed fallback phrase."""
    if isinstance(response, dict):
        error = response.get("error")
        if error:
            return error if isinstance(error, str) else str(error)
    return fallback


def _one_line(value: Any) -> Any:
    if isinstance(value, str):
        return value.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return value
