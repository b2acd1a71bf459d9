"""Zoho CRM v7 client and option resolvers."""

from __future__ import annotations

import logging
from typing import Any

from ...sdk import ConnectorClient, DecodeError, DynamicFieldContext, InvocationContext, Option

logger = logging.getLogger(__name__)

API_URL = "https://www.zohoapis.com/crm/v7"


class ZohoCRMClient(ConnectorClient):
    def __init__(self, token: str, **kwargs: Any):
        super().__init__(base_url=API_URL, **kwargs)
        self.token = token

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> ZohoCRMClient:
        return cls(ctx.auth.require_token("zohocrm"), settings=ctx.settings, transport=ctx.transport)

    @property
    def name(self) -> str:
        return "zohocrm"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Zoho-oauthtoken {self.token}"}

    async def records(self, path: str, params: dict[str, Any] | None = None) -> tuple[list[Any], dict[str, Any]]:
        """
        GET a record collection.

        Zoho answers an empty search with 204 or ``"data": null``; both
        yield an empty list.

        Returns:
            ``(data, info)``
        """
        result = self.expect_object(await self.get(path, params=params), path)
        data = result.get("data")
        if data is None:
            return [], result.get("info") or {}
        return self.expect_list(data, path), result.get("info") or {}

    def first_record(self, result: Any) -> Any:
        data = self.expect_object(result, "record").get("data")
        if not isinstance(data, list) or not data:
            raise DecodeError("invalid response format: data field is missing or empty", self.name)
        return data[0]


async def get_modules(ctx: DynamicFieldContext) -> list[Option]:
    async with ZohoCRMClient.from_context(ctx) as client:
        result = client.expect_object(await client.get("/settings/modules"), "modules")

    return ctx.respond(
        [
            Option(id=m["api_name"], name=m.get("plural_label") or m["api_name"])
            for m in result.get("modules", [])
            if m.get("api_supported", True)
        ]
    )
