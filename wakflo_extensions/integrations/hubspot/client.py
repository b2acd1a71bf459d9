"""HubSpot CRM v3 client."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ...sdk import ConnectorClient, InvocationContext
from ...sdk.polling import unix_millis

logger = logging.getLogger(__name__)

API_URL = "https://api.hubapi.com"


def search_body(
    timestamp_property: str,
    *,
    since: datetime | None = None,
    properties: list[str] | None = None,
    limit: int = 100,
) -> dict[str, Any]:
    """
    Build a CRM search request sorted newest first.

    When ``since`` is given only objects whose ``timestamp_property`` is
    greater than it (in epoch milliseconds) are requested.
    """
    body: dict[str, Any] = {
        "limit": limit,
        "sorts": [{"propertyName": timestamp_property, "direction": "DESCENDING"}],
    }
    if since is not None:
        body["filterGroups"] = [
            {"filters": [{"propertyName": timestamp_property, "operator": "GT", "value": unix_millis(since)}]}
        ]
    if properties:
        body["properties"] = properties
    return body


class HubSpotClient(ConnectorClient):
    """Bearer-token client for api.hubapi.com."""

    def __init__(self, token: str, **kwargs: Any):
        super().__init__(base_url=API_URL, **kwargs)
        self.token = token

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> HubSpotClient:
        return cls(ctx.auth.require_token("hubspot"), settings=ctx.settings, transport=ctx.transport)

    @property
    def name(self) -> str:
        return "hubspot"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def create_object(self, object_type: str, properties: dict[str, Any]) -> Any:
        return await self.post(f"/crm/v3/objects/{object_type}", json={"properties": properties})

    async def search(self, object_type: str, body: dict[str, Any]) -> dict[str, Any]:
        result = await self.post(f"/crm/v3/objects/{object_type}/search", json=body)
        return self.expect_object(result, f"{object_type} search")
