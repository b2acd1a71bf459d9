"""
Telegram Bot API client.

The bot token is part of the URL path (``/bot<token>/<method>``) rather
than a header. Every response is wrapped in ``{"ok": bool, "result": ...}``;
an ``ok`` of false is raised as a RemoteAPIError carrying the
``description`` Telegram returns.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...sdk import ConnectorClient, InvocationContext, RemoteAPIError
from ...sdk.types import JSON

logger = logging.getLogger(__name__)

API_URL = "https://api.telegram.org"


class TelegramClient(ConnectorClient):
    """Client for the Telegram Bot API."""

    def __init__(self, token: str, **kwargs: Any):
        super().__init__(base_url=f"{API_URL}/bot{token}", **kwargs)

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> TelegramClient:
        return cls(
            ctx.auth.require("token", "telegrambot", "Telegram bot token"),
            settings=ctx.settings,
            transport=ctx.transport,
        )

    @property
    def name(self) -> str:
        return "telegrambot"

    def _get_auth_headers(self) -> dict[str, str]:
        return {}

    def _error_message(self, response: httpx.Response) -> str:
        description = _description(response)
        if description:
            return f"telegram API returned status code {response.status_code}: {description}"
        return f"telegram API returned status code {response.status_code}: {response.text}"

    async def call(self, method: str, params: dict[str, Any] | None = None) -> JSON:
        """
        Call a Bot API method and return its ``result``.

        Methods without parameters are sent as GET, others as a JSON POST.
        """
        if params:
            response = await self.post(f"/{method}", json=params)
        else:
            response = await self.get(f"/{method}")

        if not isinstance(response, dict) or response.get("ok") is not True:
            description = response.get("description") if isinstance(response, dict) else None
            raise RemoteAPIError(
                f"telegram API error: {description or 'unknown error'}",
                self.name,
                status_code=200,
                response_body=str(response),
            )
        return response.get("result")


def _description(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("description")
    return None
