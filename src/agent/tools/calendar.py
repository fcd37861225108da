"""
agent.tools.calendar - SDR scheduling tools (Google Calendar).

Scheduling runs as a sequence the system prompt spells out:
getSdrSchedule -> convertUtcDatetimeToPstDatetime -> createMeeting ->
sendSlackMeetingNotification + createSalesforceTask.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import BaseModel, Field

from application.context import SessionContext
from agent.tools.base import ActionTool, BaseTool, succeeded
from agent.tools.timeutil import to_pacific
from domain.models import Outcome

logger = logging.getLogger(__name__)

MEETING_EVENT_NAME = "SDR Intro Call"


class SdrScheduleInput(BaseModel):
    dummy: Optional[str] = Field(default=None, description="dummy")


class ConvertDatetimeInput(BaseModel):
    datetime: str = Field(description="datetime in UTC")


class CreateMeetingInput(BaseModel):
    datetime: str = Field(description="datetime of meeting in west coast time (pacific time)")
    email: str = Field(description="The email of the attendee")


class GetSdrScheduleTool(ActionTool):
    name = "getSdrSchedule"
    description = (
        "Use this function when a user asks to schedule a meeting with the SDR. This function returns when "
        "the SDR is busy and UNABLE to meet."
        "Times are provided in UTC format. Use the convertUtcDatetimeToPstDatetime tool to convert UTC datetimes to"
        "PST before returning results."
    )

    def get_schema(self) -> type[BaseModel]:
        return SdrScheduleInput

    async def execute(self, ctx: SessionContext, **kwargs) -> Outcome:
        logger.info("Getting SDR Calendar")
        response = await self._gateway.get_google_calendar_availability(self._token(ctx))
        busy = response.get("busy") if isinstance(response, dict) else None
        if busy:
            return Outcome.success(json.dumps(busy))
        return Outcome.failure("Calendar could not be pulled")


class ConvertUtcDatetimeToPstDatetimeTool(BaseTool):
    name = "convertUtcDatetimeToPstDatetime"
    description = (
        "Use this function to convert UTC datetimes to PST. Use this function whenever UTC datetimes are given such as"
        " after the getSdrSchedule function tool is used."
    )

    def get_schema(self) -> type[BaseModel]:
        return ConvertDatetimeInput

    async def execute(self, ctx: SessionContext, datetime: str = "", **kwargs) -> Outcome:
        try:
            converted = to_pacific(datetime)
        except ValueError:
            return Outcome.failure(f"Invalid datetime: {datetime}")
        return Outcome.success(json.dumps({"pstDatetime": converted}))


class CreateMeetingTool(ActionTool):
    name = "createMeeting"
    description = (
        "Use this function to schedule a meeting with the user. Prompt user for their email so we know where to"
        "send the invite to. Meetings will be one hour."
    )

    def get_schema(self) -> type[BaseModel]:
        return CreateMeetingInput

    async def execute(self, ctx: SessionContext, datetime: str = "", email: str = "", **kwargs) -> Outcome:
        self._log_arguments(datetime=datetime, email=email)
        payload = {"event_name": MEETING_EVENT_NAME, "attendees": email, "start_time": datetime}
        response = await self._gateway.create_google_calendar_event(payload, self._token(ctx))
        if succeeded(response):
            return Outcome.success("Meeting created successfully")
        return Outcome.failure("Meeting failed to be created")
