"""
agent.tools.draft_confirm - Base classes for draft/confirm tool pairs.

A draft tool formats a proposed action for the user to review and records
it in the conversation's DraftStore. Its paired confirm tool performs the
one real side effect, and only when:

    1. the confirmation argument is affirmative, and
    2. a live draft for the same action family exists (when drafts are required).

Either check failing returns a Failure without touching the integrations
backend. A successful call consumes the draft; a failed call keeps it so
the user can retry from the next turn.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, ClassVar

from application.context import SessionContext
from application.drafts import is_affirmative
from agent.tools.base import ActionTool, BaseTool
from domain.models import ActionFamily, Outcome
from domain.ports import CredentialSignerPort, IntegrationGatewayPort

logger = logging.getLogger(__name__)


class DraftTool(BaseTool):
    """Formats an action for review. Performs no external side effect."""

    family: ClassVar[ActionFamily]

    @abstractmethod
    def render(self, **arguments: Any) -> str:
        """Format the drafted action as conversational text."""
        ...

    async def execute(self, ctx: SessionContext, **kwargs) -> Outcome:
        content = self.render(**kwargs)
        ctx.drafts.put(self.family, content, kwargs)
        logger.info("%s drafted %s", self.name, self.family.value)
        return Outcome.success(content)


class ConfirmTool(ActionTool):
    """Performs the drafted action once the user has affirmatively confirmed it."""

    family: ClassVar[ActionFamily]

    def __init__(
        self,
        gateway: IntegrationGatewayPort,
        signer: CredentialSignerPort,
        require_draft: bool = True,
    ):
        super().__init__(gateway, signer)
        self._require_draft = require_draft

    @abstractmethod
    async def perform(self, ctx: SessionContext, **arguments: Any) -> Outcome:
        """Make the one external call for this action and map its result."""
        ...

    async def execute(self, ctx: SessionContext, confirmation: str = "", **kwargs) -> Outcome:
        self._log_arguments(confirmation=confirmation, **kwargs)

        if not is_affirmative(confirmation):
            logger.info("%s not confirmed (%r), nothing sent", self.name, confirmation)
            return Outcome.failure(
                f"Not confirmed. The {_label(self.family)} was not created. "
                "Ask the user to confirm the draft first."
            )

        if self._require_draft and ctx.drafts.get(self.family) is None:
            logger.warning("%s called without a live draft, refusing", self.name)
            return Outcome.failure(
                f"No {_label(self.family)} draft is awaiting confirmation. "
                "Create a draft and get the user's confirmation first."
            )

        outcome = await self.perform(ctx, **kwargs)
        if outcome.ok:
            ctx.drafts.consume(self.family)
        return outcome


def _label(family: ActionFamily) -> str:
    return {
        ActionFamily.SLACK_MESSAGE: "Slack message",
        ActionFamily.SALESFORCE_CONTACT: "Salesforce Contact",
        ActionFamily.SALESFORCE_OPPORTUNITY: "Salesforce Opportunity",
        ActionFamily.ASANA_TASK: "Asana task",
    }[family]
