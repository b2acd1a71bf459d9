"""
Discord REST API client (bot authentication).

List endpoints return arrays; single-resource endpoints return objects.
``get_list`` normalizes both to a list so callers can filter uniformly.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx

from ...sdk import ConnectorClient, DynamicFieldContext, InvocationContext, Option

API_URL = "https://discord.com/api/v10"

# Discord snowflakes count milliseconds from the first second of 2015.
DISCORD_EPOCH = datetime(2015, 1, 1, tzinfo=UTC)


def snowflake_from_datetime(value: datetime) -> int:
    """Smallest snowflake id that could have been generated at ``value``."""
    millis = int((value - DISCORD_EPOCH).total_seconds() * 1000)
    return max(millis, 0) << 22


class DiscordClient(ConnectorClient):
    """Client for the Discord REST API."""

    def __init__(self, token: str, **kwargs: Any):
        super().__init__(base_url=API_URL, **kwargs)
        self.token = token

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> DiscordClient:
        token = ctx.auth.get("token") or ctx.auth.require_token("discord")
        return cls(token, settings=ctx.settings, transport=ctx.transport)

    @property
    def name(self) -> str:
        return "discord"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bot {self.token}"}

    def _error_message(self, response: httpx.Response) -> str:
        return f"Discord API error: {response.text} (Status Code: {response.status_code})"

    async def get_list(self, path: str, *, params: dict[str, Any] | None = None) -> list[Any]:
        data = await self.get(path, params=params)
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and data:
            return [data]
        return []

    async def list_guilds(self) -> list[dict[str, Any]]:
        return await self.get_list("/users/@me/guilds")

    async def list_channels(self, guild_id: str) -> list[dict[str, Any]]:
        return await self.get_list(f"/guilds/{guild_id}/channels")

    async def list_roles(self, guild_id: str) -> list[dict[str, Any]]:
        return await self.get_list(f"/guilds/{guild_id}/roles")


# =============================================================================
# Dynamic options
# =============================================================================


async def get_guilds(ctx: DynamicFieldContext) -> list[Option]:
    async with DiscordClient.from_context(ctx) as client:
        guilds = await client.list_guilds()
    return ctx.respond([Option(id=g["id"], name=g.get("name", g["id"])) for g in guilds])


async def get_channels(ctx: DynamicFieldContext) -> list[Option]:
    guild_id = ctx.value("guild-id")
    if not guild_id:
        return []
    async with DiscordClient.from_context(ctx) as client:
        channels = await client.list_channels(guild_id)
    return ctx.respond([Option(id=c["id"], name=c.get("name", c["id"])) for c in channels])


async def get_roles(ctx: DynamicFieldContext) -> list[Option]:
    guild_id = ctx.value("guild-id")
    if not guild_id:
        return []
    async with DiscordClient.from_context(ctx) as client:
        roles = await client.list_roles(guild_id)
    return ctx.respond([Option(id=r["id"], name=r.get("name", r["id"])) for r in roles])
