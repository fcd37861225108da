"""
infrastructure.integrations.gateway - HTTP client for the integrations backend.

Implements IntegrationGatewayPort by calling the backend that holds the
Slack, Salesforce, Asana, Google Calendar and Notion connections. Each
call is authorized with the caller's freshly signed JWT.

Uses requests via run_in_executor for async compat. No timeout is set
beyond the client's default and nothing is retried: a failed call is
surfaced once and the conversation decides what to do next.

Non-2xx responses come back as {"status": False, "error": ...} so the
calling tool can pass the upstream error through. Transport failures
(unreachable host, undecodable body) raise IntegrationError.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Optional

import requests

from domain.exceptions import IntegrationError

logger = logging.getLogger(__name__)

# Backend routes, relative to the configured base URL.
SLACK_SEND = "slack/send"
SALESFORCE_CONTACT = "salesforce/contact"
SALESFORCE_OPPORTUNITY = "salesforce/opportunity"
SALESFORCE_TASK = "salesforce/task"
ASANA_TEAM = "asana/team"
ASANA_TASK = "asana/task"
CALENDAR_AVAILABILITY = "google-calendar/availability"
CALENDAR_EVENT = "google-calendar/event"
NOTION_PAGE = "notion/page"


class HttpIntegrationGateway:
    """Call the integrations backend over HTTP.

    Implements IntegrationGatewayPort (structural typing, no explicit inheritance).
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/") + "/"
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # Slack
    # ------------------------------------------------------------------

    async def send_slack(self, message: str, token: str) -> dict[str, Any]:
        return await self._call("POST", SLACK_SEND, token, {"message": message})

    # ------------------------------------------------------------------
    # Salesforce
    # ------------------------------------------------------------------

    async def create_salesforce_contact(self, payload: dict[str, Any], token: str) -> dict[str, Any]:
        return await self._call("POST", SALESFORCE_CONTACT, token, payload)

    async def create_salesforce_opportunity(self, payload: dict[str, Any], token: str) -> dict[str, Any]:
        """Create an opportunity. BANT fields map onto Salesforce custom fields."""
        body = {
            "opportunity_name": payload.get("opportunity_name"),
            "budget__c": payload.get("budget"),
            "authority__c": payload.get("authority"),
            "need__c": payload.get("need"),
            "timing__c": payload.get("timing"),
        }
        return await self._call("POST", SALESFORCE_OPPORTUNITY, token, body)

    async def attach_salesforce_task(self, payload: dict[str, Any], token: str) -> dict[str, Any]:
        return await self._call("POST", SALESFORCE_TASK, token, payload)

    # ------------------------------------------------------------------
    # Asana
    # ------------------------------------------------------------------

    async def get_asana_team(self, token: str) -> dict[str, Any]:
        return await self._call("GET", ASANA_TEAM, token)

    async def create_asana_task(self, payload: dict[str, Any], token: str) -> dict[str, Any]:
        return await self._call("POST", ASANA_TASK, token, payload)

    # ------------------------------------------------------------------
    # Google Calendar
    # ------------------------------------------------------------------

    async def get_google_calendar_availability(self, token: str) -> dict[str, Any]:
        return await self._call("GET", CALENDAR_AVAILABILITY, token)

    async def create_google_calendar_event(self, payload: dict[str, Any], token: str) -> dict[str, Any]:
        return await self._call("POST", CALENDAR_EVENT, token, payload)

    # ------------------------------------------------------------------
    # Notion
    # ------------------------------------------------------------------

    async def create_notion_page(self, payload: dict[str, Any], token: str) -> dict[str, Any]:
        return await self._call("POST", NOTION_PAGE, token, payload)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _call(
        self,
        method: str,
        route: str,
        token: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None, functools.partial(self._request, method, route, token, payload),
        )

    def _request(
        self,
        method: str,
        route: str,
        token: str,
        payload: Optional[dict[str, Any]],
    ) -> dict[str, Any]:
        """Synchronous HTTP call to the integrations backend (runs in thread pool)."""
        url = self._base_url + route
        logger.info("Integration call %s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                json=payload if method != "GET" else None,
                headers={"Authorization": f"Bearer {token}"},
            )
        except requests.exceptions.RequestException as e:
            raise IntegrationError(f"Integrations backend unreachable at {url}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            logger.warning(
                "Integration call %s %s returned HTTP %d", method, url, response.status_code,
            )
            if isinstance(data, dict):
                data.setdefault("error", f"HTTP {response.status_code}")
                data["status"] = False
                return data
            return {
                "status": False,
                "error": f"HTTP {response.status_code}: {response.text[:200]}",
            }

        if not isinstance(data, dict):
            raise IntegrationError(
                f"Integrations backend returned a non-object body for {route}: {response.text[:200]}"
            )
        return data
