"""
Freshdesk API client.

Authenticates with HTTP Basic using the API key as the username and
``X`` as the password. The helpdesk domain may be entered as ``acme``,
``acme.freshdesk.com`` or ``https://acme.freshdesk.com``.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

from ...sdk import ConnectorClient, DynamicFieldContext, InvocationContext, Option

logger = logging.getLogger(__name__)

TICKET_PRIORITIES = [("1", "Low"), ("2", "Medium"), ("3", "High"), ("4", "Urgent")]
TICKET_STATUSES = [("2", "Open"), ("3", "Pending"), ("4", "Resolved"), ("5", "Closed")]


def build_freshdesk_url(domain: str) -> str:
    """Normalize a helpdesk domain to ``https://<name>.freshdesk.com``."""
    domain = domain.strip().rstrip("/")
    domain = domain.removeprefix("https://").removeprefix("http://")
    domain = domain.removesuffix(".freshdesk.com")
    return f"https://{domain}.freshdesk.com"


class FreshdeskClient(ConnectorClient):
    """Client for the Freshdesk v2 API."""

    def __init__(self, domain: str, api_key: str, **kwargs: Any):
        super().__init__(base_url=f"{build_freshdesk_url(domain)}/api/v2", **kwargs)
        self.api_key = api_key

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> FreshdeskClient:
        return cls(
            ctx.auth.require("domain", "freshdesk", "Freshdesk domain"),
            ctx.auth.require("api-key", "freshdesk", "Freshdesk API key"),
            settings=ctx.settings,
            transport=ctx.transport,
        )

    @property
    def name(self) -> str:
        return "freshdesk"

    def _get_auth_headers(self) -> dict[str, str]:
        credentials = base64.b64encode(f"{self.api_key}:X".encode()).decode()
        return {"Authorization": f"Basic {credentials}"}

    async def list_tickets(self, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        return self.expect_list(await self.get("/tickets", params=params), "tickets")

    async def get_ticket(self, ticket_id: str) -> dict[str, Any]:
        return self.expect_object(await self.get(f"/tickets/{ticket_id}"), "ticket")

    async def create_ticket(self, payload: dict[str, Any]) -> Any:
        logger.info(f"[freshdesk] Creating ticket: {payload.get('subject')}")
        return await self.post("/tickets", json=payload)

    async def update_ticket(self, ticket_id: str, payload: dict[str, Any]) -> Any:
        logger.info(f"[freshdesk] Updating ticket {ticket_id}")
        return await self.put(f"/tickets/{ticket_id}", json=payload)

    async def search_tickets(self, query: str, **params: Any) -> dict[str, Any]:
        """Run a filter query. The query must be wrapped in double quotes."""
        if not (query.startswith('"') and query.endswith('"')):
            query = f'"{query}"'
        data = await self.get("/search/tickets", params={"query": query, **params})
        return self.expect_object(data, "search")


async def get_tickets(ctx: DynamicFieldContext) -> list[Option]:
    async with FreshdeskClient.from_context(ctx) as client:
        tickets = await client.list_tickets({"per_page": 100})
    return ctx.respond(
        [Option(id=str(t["id"]), name=t.get("subject") or f"Ticket {t['id']}") for t in tickets]
    )
