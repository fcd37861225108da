"""
infrastructure.rag.filters - Document visibility filters for retrieval.

A PermissionFilter is derived once per agent from the caller-supplied
document ids and scopes every passage that agent can retrieve. Chunks
carry two metadata keys written at ingestion time:

    doc_id   - identifier of the source document
    private  - "true" for uploaded/private documents, absent or "false" otherwise

With a non-empty scope only passages of the listed documents are visible.
With an empty scope only public passages are visible.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

DOC_ID_KEY = "doc_id"
PRIVATE_KEY = "private"


@dataclass(frozen=True)
class PermissionFilter:
    """Immutable document scope. Safe to share; never mutated after creation."""
    document_ids: frozenset[str] = frozenset()

    @property
    def is_scoped(self) -> bool:
        return bool(self.document_ids)

    def allows(self, metadata: Optional[Mapping[str, Any]]) -> bool:
        metadata = metadata or {}
        doc_id = str(metadata.get(DOC_ID_KEY, ""))
        if self.is_scoped:
            return doc_id in self.document_ids
        return not _is_private(metadata)

    def __call__(self, metadata: Optional[Mapping[str, Any]]) -> bool:
        return self.allows(metadata)


def _is_private(metadata: Mapping[str, Any]) -> bool:
    value = metadata.get(PRIVATE_KEY)
    return value is True or str(value).lower() == "true"


def generate_filters(document_ids: Optional[Iterable[str]]) -> PermissionFilter:
    """Build the permission filter for a caller's document scope.

    The ids are copied, so later changes to the caller's list do not leak
    into an agent that was already built.
    """
    ids = frozenset(str(d) for d in (document_ids or ()) if str(d).strip())
    return PermissionFilter(document_ids=ids)
