"""
agent.tools.asana - Asana task tools.

draftAsanaTask records the proposed task and shows the team roster so the
user can pick an assignee; getAsanaMemberId turns a member's name into the
id confirmAndCreateAsanaTask expects.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field

from application.context import SessionContext
from agent.tools.base import ActionTool, succeeded
from agent.tools.draft_confirm import ConfirmTool, DraftTool
from domain.models import ActionFamily, Outcome, TeamMember
from domain.ports import CredentialSignerPort, IntegrationGatewayPort

logger = logging.getLogger(__name__)

MEMBER_NOT_FOUND = "Cannot be found"


class DraftAsanaTaskInput(BaseModel):
    taskName: str = Field(description="The name of task")
    notes: Optional[str] = Field(default=None, description="Additional notes for the Asana task")
    assignee: Optional[str] = Field(default=None, description="The ID for the assignee of the Asana Task")


class AsanaMemberIdInput(BaseModel):
    name: str = Field(description="The name of the team member")


class ConfirmAsanaTaskInput(BaseModel):
    taskName: str = Field(description="The drafted name of task")
    notes: Optional[str] = Field(default=None, description="Additional notes on the drafted task")
    assignee: Optional[str] = Field(default=None, description="The ID for the assignee of the Asana Task")
    confirmation: str = Field(description="affirmative confirmation to send draft message")


def team_members(response: Any) -> list[TeamMember]:
    """Members listed in an Asana team response; empty when the call failed."""
    if not isinstance(response, dict):
        return []
    return [
        TeamMember.from_payload(m)
        for m in response.get("members") or []
        if isinstance(m, dict)
    ]


class DraftAsanaTaskTool(DraftTool):
    name = "draftAsanaTask"
    description = (
        "Use this function to draft a task in Asana. This is a required function step"
        "before creating a task in Asana. Prompt user to assign a team member form their Asana team if assignee is not mentioned. "
        "Get the ID of a team member before assigning it to an assignee."
        "If user does not need an assignee or has assigned an assignee with their id, proceed to the confirm "
        "and create Asana task step. "
        "This function does not create the Asana task. "
        "This function only drafts an Asana task and prompts for confirmation"
    )
    family = ActionFamily.ASANA_TASK

    def __init__(self, gateway: IntegrationGatewayPort, signer: CredentialSignerPort):
        self._gateway = gateway
        self._signer = signer

    def get_schema(self) -> type[BaseModel]:
        return DraftAsanaTaskInput

    def render(
        self,
        taskName: str = "",
        notes: Optional[str] = None,
        assignee: Optional[str] = None,
        members: Optional[list[TeamMember]] = None,
        **kwargs,
    ) -> str:
        lines = [
            "Asana Task name: " + taskName,
            "Asana Task notes: " + (notes or ""),
            "Asana Task assignee: " + (assignee or "unassigned"),
        ]
        if members:
            lines.append("Team members:")
            lines.extend(f"- {m.name} ({m.gid})" for m in members)
        elif members is not None:
            lines.append("Team members could not be retrieved.")
        return "\n".join(lines)

    async def execute(self, ctx: SessionContext, **kwargs) -> Outcome:
        logger.info("Task Name: %s", kwargs.get("taskName"))
        response = await self._gateway.get_asana_team(self._signer.sign(ctx.caller.user_id))
        content = self.render(members=team_members(response), **kwargs)
        ctx.drafts.put(self.family, content, kwargs)
        return Outcome.success(content)


class GetAsanaMemberIdTool(ActionTool):
    name = "getAsanaMemberId"
    description = (
        "Use this function after a team member is assigned to an Asana task. This function gets the ID "
        "of an Asana team member"
    )

    def get_schema(self) -> type[BaseModel]:
        return AsanaMemberIdInput

    async def execute(self, ctx: SessionContext, name: str = "", **kwargs) -> Outcome:
        """Exact, case-sensitive name lookup. A miss is an answer, not an error."""
        logger.info("Getting Asana ID for: %s", name)
        response = await self._gateway.get_asana_team(self._token(ctx))
        for member in team_members(response):
            if member.name == name:
                return Outcome.success(member.gid)
        return Outcome.success(MEMBER_NOT_FOUND)


class ConfirmAndCreateAsanaTaskTool(ConfirmTool):
    name = "confirmAndCreateAsanaTask"
    description = (
        "Use this function to create a task in Asana only after a draft for the task has been created. "
        "If an assignee is provided, check to see if the assignee is an ID number. If the assignee is not an ID, get"
        "the ID of the Asana team member. Do"
        "not use this function if an affirmative confirmation is not given. Do not use this function if"
        "an Asana task draft has not been created"
    )
    family = ActionFamily.ASANA_TASK
    required_first = ("confirmation",)

    def get_schema(self) -> type[BaseModel]:
        return ConfirmAsanaTaskInput

    async def perform(
        self,
        ctx: SessionContext,
        taskName: str = "",
        notes: Optional[str] = None,
        assignee: Optional[str] = None,
        **kwargs,
    ) -> Outcome:
        payload = {"taskName": taskName, "notes": notes, "assignee": assignee}
        response = await self._gateway.create_asana_task(payload, self._token(ctx))
        if succeeded(response):
            return Outcome.success("Successfully created Asana task")
        return Outcome.failure("Asana task failed to be created")
