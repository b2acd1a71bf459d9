"""
Campaign Monitor (createsend) API client.

Authenticates with HTTP Basic using the API key as the username and ``x``
as the password. Most endpoints are scoped to the client id stored next
to the API key in the connection.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

from ...sdk import AuthError, ConnectorClient, DynamicFieldContext, InvocationContext, Option

logger = logging.getLogger(__name__)

API_URL = "https://api.createsend.com/api/v3.3"


class CampaignMonitorClient(ConnectorClient):
    """Client for the Campaign Monitor v3.3 API."""

    def __init__(self, api_key: str, client_id: str | None = None, **kwargs: Any):
        super().__init__(base_url=API_URL, **kwargs)
        self.api_key = api_key
        self.client_id = client_id

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> CampaignMonitorClient:
        return cls(
            ctx.auth.require("api-key", "campaignmonitor", "Campaign Monitor API key"),
            ctx.auth.get("client-id"),
            settings=ctx.settings,
            transport=ctx.transport,
        )

    @property
    def name(self) -> str:
        return "campaignmonitor"

    def _get_auth_headers(self) -> dict[str, str]:
        credentials = base64.b64encode(f"{self.api_key}:x".encode()).decode()
        return {"Authorization": f"Basic {credentials}"}

    def require_client_id(self, override: str | None = None) -> str:
        client_id = override or self.client_id
        if not client_id:
            raise AuthError("client ID is required", self.name)
        return client_id

    async def client_resource(self, resource: str, client_id: str | None = None) -> list[dict[str, Any]]:
        """GET ``clients/<id>/<resource>.json`` (lists, campaigns, drafts, scheduled)."""
        data = await self.get(f"/clients/{self.require_client_id(client_id)}/{resource}.json")
        return self.expect_list(data, resource)


async def get_lists(ctx: DynamicFieldContext) -> list[Option]:
    async with CampaignMonitorClient.from_context(ctx) as client:
        lists = await client.client_resource("lists")
    return ctx.respond([Option(id=item["ListID"], name=item.get("Name", item["ListID"])) for item in lists])


async def get_draft_campaigns(ctx: DynamicFieldContext) -> list[Option]:
    async with CampaignMonitorClient.from_context(ctx) as client:
        drafts = await client.client_resource("drafts")
    return ctx.respond(
        [Option(id=item["CampaignID"], name=item.get("Name", item["CampaignID"])) for item in drafts]
    )
