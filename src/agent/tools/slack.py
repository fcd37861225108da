"""
agent.tools.slack - Slack message tools.

draftSlackMessage / confirmAndSendSlackMessage form a draft/confirm pair.
sendSlackMeetingNotification posts directly; it only follows a meeting the
user already asked to schedule.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from application.context import SessionContext
from agent.tools.base import ActionTool, succeeded
from agent.tools.draft_confirm import ConfirmTool, DraftTool
from agent.tools.timeutil import describe_datetime
from domain.models import ActionFamily, Outcome


class DraftSlackMessageInput(BaseModel):
    message: str = Field(description="The draft message")


class ConfirmAndSendSlackMessageInput(BaseModel):
    message: str = Field(description="The draft message")
    confirmation: str = Field(description="affirmative confirmation to send draft message")


class SlackMeetingNotificationInput(BaseModel):
    datetime: str = Field(description="datetime of meeting")
    email: str = Field(description="The email of the attendee")


class DraftSlackMessageTool(DraftTool):
    """Draft a Slack message for review."""

    name = "draftSlackMessage"
    description = (
        "Use this function to draft a message in Slack. This is a required function step"
        "before sending the message in Slack. Prompt confirmation from "
        "user to trigger the confirm and send step. This function does not send the message in"
        "Slack. This function only drafts a message and prompts for confirmation"
    )
    family = ActionFamily.SLACK_MESSAGE

    def get_schema(self) -> type[BaseModel]:
        return DraftSlackMessageInput

    def render(self, message: str = "", **kwargs) -> str:
        return "Message: " + message


class ConfirmAndSendSlackMessageTool(ConfirmTool):
    """Send the drafted Slack message."""

    name = "confirmAndSendSlackMessage"
    description = (
        "Use this function to send a message in Slack only after a draft has been created. Do"
        "not use this function if an affirmative confirmation is not given. Do not use this function if"
        "a Slack message draft has not been created"
    )
    family = ActionFamily.SLACK_MESSAGE
    required_first = ("confirmation",)

    def get_schema(self) -> type[BaseModel]:
        return ConfirmAndSendSlackMessageInput

    async def perform(self, ctx: SessionContext, message: str = "", **kwargs) -> Outcome:
        response = await self._gateway.send_slack(message, self._token(ctx))
        if succeeded(response):
            return Outcome.success("Successfully Sent")
        return Outcome.failure("Message not sent successfully")


class SendSlackMeetingNotificationTool(ActionTool):
    """Announce a scheduled meeting in Slack."""

    name = "sendSlackMeetingNotification"
    description = (
        "Use this function after a meeting has been created with the createMeeting tool. Create a Salesforce Task "
        "using the createSalesforceTask if not done yet."
    )

    def get_schema(self) -> type[BaseModel]:
        return SlackMeetingNotificationInput

    async def execute(self, ctx: SessionContext, datetime: str = "", email: str = "", **kwargs) -> Outcome:
        self._log_arguments(datetime=datetime, email=email)
        message = "Meeting scheduled for " + describe_datetime(datetime) + " with " + email
        response = await self._gateway.send_slack(message, self._token(ctx))
        if succeeded(response):
            return Outcome.success("Slack meeting notification created successfully")
        return Outcome.failure("Slack meeting notification failed to be created")
