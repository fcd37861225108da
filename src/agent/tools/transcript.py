"""
agent.tools.transcript - Meeting transcript hand-off.

Echoes the transcript back so the model summarizes it in its own reply
and offers the follow-up actions (opportunity, Slack message, Asana task).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from application.context import SessionContext
from agent.tools.base import BaseTool
from domain.models import Outcome


class SummarizeTranscriptInput(BaseModel):
    transcript: str = Field(description="Transcript of a meeting")


class SummarizeTranscriptTool(BaseTool):
    name = "summarizeTranscript"
    description = (
        "Use this function when a user asks for a meeting transcript to be summarized. "
        "Based off the transcript present the option to draft a Salesforce Opportunity, send a Slack Message, "
        "or create a task in Asana"
    )

    def get_schema(self) -> type[BaseModel]:
        return SummarizeTranscriptInput

    async def execute(self, ctx: SessionContext, transcript: str = "", **kwargs) -> Outcome:
        return Outcome.success("Transcript: " + transcript)
