"""
domain.models - Value objects for the tool-orchestration layer.

These are immutable data containers with no dependencies on
infrastructure (no LangChain, no HTTP, no FAISS). The only third-party
import is pydantic, used to read declared parameter models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from domain.exceptions import ToolSpecError


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

class OutcomeKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Outcome:
    """Result of one tool invocation.

    Both kinds carry conversational text; the dispatch loop feeds either
    one back to the model as-is. There is no structured error channel.
    """
    kind: OutcomeKind
    text: str

    @classmethod
    def success(cls, text: str) -> Outcome:
        return cls(OutcomeKind.SUCCESS, text)

    @classmethod
    def failure(cls, text: str) -> Outcome:
        return cls(OutcomeKind.FAILURE, text)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def __str__(self) -> str:
        return self.text


# ---------------------------------------------------------------------------
# Tool specification
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParameterSpec:
    """One entry of a tool's parameter schema."""
    name: str
    type: str
    description: str
    required: bool = False


@dataclass(frozen=True)
class ToolSpec:
    """Name, description and ordered parameter schema of a tool.

    The rendered schema (to_function_schema) is prompt content: property
    names, required-ness and descriptions are what the model reads when
    choosing a tool.
    """
    name: str
    description: str
    parameters: tuple[ParameterSpec, ...] = ()
    required: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ToolSpecError("Tool name must not be empty")
        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            raise ToolSpecError(f"Duplicate parameter names in tool '{self.name}'")
        missing = [r for r in self.required if r not in names]
        if missing:
            raise ToolSpecError(
                f"Tool '{self.name}' requires undeclared parameter(s): {', '.join(missing)}"
            )

    @classmethod
    def from_model(
        cls,
        name: str,
        description: str,
        model: type[BaseModel],
        required_first: tuple[str, ...] = (),
    ) -> ToolSpec:
        """Derive a spec from a pydantic input model, keeping field order.

        Required names follow field order, except those in required_first,
        which lead in the order given.
        """
        json_schema = model.model_json_schema()
        properties = json_schema.get("properties", {})

        params: list[ParameterSpec] = []
        for field_name, info in model.model_fields.items():
            params.append(ParameterSpec(
                name=field_name,
                type=_json_type(properties.get(field_name, {})),
                description=info.description or "",
                required=info.is_required(),
            ))
        return cls(
            name=name,
            description=description,
            parameters=tuple(params),
            required=tuple(required_first) + tuple(
                p.name for p in params if p.required and p.name not in required_first
            ),
        )

    def parameter(self, name: str) -> Optional[ParameterSpec]:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    def to_function_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    p.name: {"type": p.type, "description": p.description}
                    for p in self.parameters
                },
                "required": list(self.required),
            },
        }


def _json_type(prop: dict[str, Any]) -> str:
    """Pick the JSON type of a pydantic property, unwrapping Optional[...]."""
    if "type" in prop:
        return prop["type"]
    for option in prop.get("anyOf", []):
        if option.get("type") and option["type"] != "null":
            return option["type"]
    return "string"


# ---------------------------------------------------------------------------
# Action families and integration payloads
# ---------------------------------------------------------------------------

class ActionFamily(str, Enum):
    """Side-effecting actions that go through a draft before being confirmed."""
    SLACK_MESSAGE = "slack_message"
    SALESFORCE_CONTACT = "salesforce_contact"
    SALESFORCE_OPPORTUNITY = "salesforce_opportunity"
    ASANA_TASK = "asana_task"


@dataclass(frozen=True)
class TeamMember:
    gid: str
    name: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> TeamMember:
        return cls(gid=str(payload.get("gid", "")), name=str(payload.get("name", "")))


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Passage:
    """A ranked chunk of a document returned by the query engine."""
    text: str
    doc_id: str = ""
    score: Optional[float] = None
    metadata: dict[str, Any] = field(default_factory=dict)
