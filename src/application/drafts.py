"""
application.drafts - Explicit Drafted state for draft/confirm tool pairs.

A draft tool records what it proposed under its action family; the paired
confirm tool only performs the side effect while a live record exists and
consumes it on success. Records expire so a stale proposal from earlier in
a long conversation cannot be confirmed by accident.

    Undrafted --draft--> Drafted --confirm(affirmative)--> Executed
                            |  \--confirm(negative/empty)--> Drafted
                            \--ttl elapsed--> Undrafted
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from domain.models import ActionFamily

logger = logging.getLogger(__name__)

DEFAULT_DRAFT_TTL_SECONDS = 900.0

_NEGATIVE_REPLIES = {
    "no", "n", "nope", "nah", "false", "0", "cancel", "stop", "abort",
    "never", "negative", "don't", "dont", "do not", "not yet", "wait",
    "no thanks", "no thank you",
}


def is_affirmative(confirmation: Optional[str]) -> bool:
    """Whether a confirmation argument actually approves the action.

    Empty, whitespace-only and explicitly negative replies do not.
    """
    if confirmation is None:
        return False
    text = str(confirmation).strip().lower().rstrip(".!")
    if not text:
        return False
    if text in _NEGATIVE_REPLIES:
        return False
    return not text.startswith(("no ", "no,", "don't ", "do not ", "dont "))


@dataclass(frozen=True)
class DraftRecord:
    family: ActionFamily
    content: str
    arguments: dict[str, Any] = field(default_factory=dict)
    created_at: float = 0.0
    expires_at: float = 0.0


class DraftStore:
    """Latest draft per action family for one conversation."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_DRAFT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._records: dict[ActionFamily, DraftRecord] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def put(
        self,
        family: ActionFamily,
        content: str,
        arguments: Optional[dict[str, Any]] = None,
    ) -> DraftRecord:
        """Record a draft, replacing any earlier one for the same family."""
        now = self._clock()
        record = DraftRecord(
            family=family,
            content=content,
            arguments=dict(arguments or {}),
            created_at=now,
            expires_at=now + self._ttl,
        )
        self._records[family] = record
        logger.debug("Drafted %s (expires in %.0fs)", family.value, self._ttl)
        return record

    def get(self, family: ActionFamily) -> Optional[DraftRecord]:
        """Return the live draft for a family, dropping it if expired."""
        record = self._records.get(family)
        if record is None:
            return None
        if self._clock() >= record.expires_at:
            logger.info("Draft for %s expired", family.value)
            del self._records[family]
            return None
        return record

    def consume(self, family: ActionFamily) -> Optional[DraftRecord]:
        """Remove and return the live draft (Drafted -> Executed)."""
        record = self.get(family)
        if record is not None:
            del self._records[family]
        return record

    def discard(self, family: ActionFamily) -> None:
        self._records.pop(family, None)

    def __contains__(self, family: object) -> bool:
        return isinstance(family, ActionFamily) and self.get(family) is not None

    def __len__(self) -> int:
        return sum(1 for family in list(self._records) if self.get(family) is not None)
