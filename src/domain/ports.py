"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the tools need without specifying HOW. Infrastructure
modules provide concrete implementations; tests provide fakes. Using
typing.Protocol (structural typing) instead of ABC, so any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from domain.models import Passage


# Every integration call returns the decoded JSON body: {status, error?, ...}
IntegrationResponse = dict[str, Any]


@runtime_checkable
class CredentialSignerPort(Protocol):
    """Derive a short-lived credential for one external call."""

    def sign(self, user_id: str) -> str: ...


@runtime_checkable
class IntegrationGatewayPort(Protocol):
    """One call per action family on the integrations backend."""

    async def send_slack(self, message: str, token: str) -> IntegrationResponse: ...

    async def create_salesforce_contact(
        self, payload: dict[str, Any], token: str,
    ) -> IntegrationResponse: ...

    async def create_salesforce_opportunity(
        self, payload: dict[str, Any], token: str,
    ) -> IntegrationResponse: ...

    async def attach_salesforce_task(
        self, payload: dict[str, Any], token: str,
    ) -> IntegrationResponse: ...

    async def get_asana_team(self, token: str) -> IntegrationResponse: ...

    async def create_asana_task(
        self, payload: dict[str, Any], token: str,
    ) -> IntegrationResponse: ...

    async def get_google_calendar_availability(self, token: str) -> IntegrationResponse: ...

    async def create_google_calendar_event(
        self, payload: dict[str, Any], token: str,
    ) -> IntegrationResponse: ...

    async def create_notion_page(
        self, payload: dict[str, Any], token: str,
    ) -> IntegrationResponse: ...


@runtime_checkable
class QueryEnginePort(Protocol):
    """Answer a free-text query with ranked, permission-filtered passages."""

    async def query(self, text: str) -> list[Passage]: ...


@runtime_checkable
class DocumentIndexPort(Protocol):
    """A queryable document index."""

    def as_query_engine(self, similarity_top_k: int, pre_filters: Any) -> QueryEnginePort: ...
