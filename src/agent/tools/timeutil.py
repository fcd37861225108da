"""
agent.tools.timeutil - Datetime parsing shared by the scheduling tools.

Calendar availability comes back in UTC; the SDR works on Pacific time.
Naive datetimes from the model are read as UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

PACIFIC = ZoneInfo("America/Los_Angeles")

_DISPLAY_FORMAT = "%a %b %d %Y %H:%M:%S GMT%z (%Z)"


def parse_datetime(text: str) -> datetime:
    """Parse an ISO-8601 datetime. Raises ValueError if it is not one."""
    value = datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def to_pacific(text: str) -> str:
    """Render a datetime in Pacific time. Raises ValueError on unparseable input."""
    return parse_datetime(text).astimezone(PACIFIC).strftime(_DISPLAY_FORMAT)


def describe_datetime(text: str) -> str:
    """Pacific rendering for messages, falling back to the text as given."""
    try:
        return to_pacific(text)
    except ValueError:
        return text


def utc_date(text: str) -> str:
    """Calendar date (YYYY-MM-DD) of a datetime in UTC."""
    return parse_datetime(text).astimezone(timezone.utc).date().isoformat()
