"""Pinterest API v5 client and option resolvers."""

from __future__ import annotations

import logging
from typing import Any

from ...sdk import ConnectorClient, DynamicFieldContext, InvocationContext, Option

logger = logging.getLogger(__name__)

API_URL = "https://api.pinterest.com/v5"


class PinterestClient(ConnectorClient):
    def __init__(self, token: str, **kwargs: Any):
        super().__init__(base_url=API_URL, **kwargs)
        self.token = token

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> PinterestClient:
        return cls(ctx.auth.require_token("pinterest"), settings=ctx.settings, transport=ctx.transport)

    @property
    def name(self) -> str:
        return "pinterest"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def items(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """GET a paged collection and return its ``items``."""
        page = self.expect_object(await self.get(path, params=params), path)
        return self.expect_list(page.get("items", []), path)


async def get_boards(ctx: DynamicFieldContext) -> list[Option]:
    async with PinterestClient.from_context(ctx) as client:
        boards = await client.items("/boards", {"page_size": 100, "privacy": "ALL"})

    options = []
    for board in boards:
        label = board.get("name") or board["id"]
        if board.get("pin_count"):
            label = f"{label} ({board['pin_count']} pins)"
        options.append(Option(id=board["id"], name=label))
    return ctx.respond(options)


async def get_ad_accounts(ctx: DynamicFieldContext) -> list[Option]:
    async with PinterestClient.from_context(ctx) as client:
        accounts = await client.items("/ad_accounts", {"page_size": 100})

    options = []
    for account in accounts:
        label = account.get("name") or account["id"]
        if account.get("country") and account.get("currency"):
            label = f"{label} ({account['country']}/{account['currency']})"
        options.append(Option(id=account["id"], name=label))
    return ctx.respond(options)


async def get_board_pins(ctx: DynamicFieldContext) -> list[Option]:
    board_id = ctx.value("board_id")
    if not board_id:
        return []
    async with PinterestClient.from_context(ctx) as client:
        pins = await client.items(f"/boards/{board_id}/pins", {"page_size": 100})
    return ctx.respond([Option(id=pin["id"], name=pin.get("title") or pin["id"]) for pin in pins])
