"""
application.context - Caller identity and per-agent session context.

Every tool receives its context explicitly. Two agents built for the same
user get two different SessionContext instances (and two draft stores),
so nothing one conversation drafts can be confirmed from another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Union
from uuid import uuid4

from application.drafts import DraftStore
from domain.exceptions import ConfigurationError

# A plain user id, or a zero-argument provider returning one.
Identity = Union[str, Callable[[], str]]


def resolve_identity(identity: Identity) -> str:
    """Evaluate an identity provider exactly once and validate the result."""
    user_id = identity() if callable(identity) else identity
    if not isinstance(user_id, str) or not user_id.strip():
        raise ConfigurationError("Caller identity must be a non-empty string")
    return user_id.strip()


@dataclass(frozen=True)
class CallerContext:
    """Who the agent acts on behalf of. Immutable for the agent's lifetime."""
    user_id: str

    @classmethod
    def from_identity(cls, identity: Identity) -> CallerContext:
        return cls(user_id=resolve_identity(identity))


@dataclass
class SessionContext:
    """Per-agent context passed to every tool invocation.

    Attributes:
        caller:           Identity used to sign a credential for each external call.
        conversation_id:  Unique per conversation session.
        drafts:           Draft records awaiting confirmation in this conversation.
        request_id:       Unique per turn, for tracing/logging.
    """
    caller: CallerContext
    conversation_id: str = field(default_factory=lambda: uuid4().hex)
    drafts: DraftStore = field(default_factory=DraftStore)
    request_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def user_id(self) -> str:
        return self.caller.user_id

    def new_request(self) -> None:
        """Start a new turn. Drafts survive across turns."""
        self.request_id = uuid4().hex
