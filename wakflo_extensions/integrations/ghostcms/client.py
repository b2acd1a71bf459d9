"""
Ghost Admin API client.

Admin API keys have the form ``<id>:<hex secret>``. Each request carries
a short-lived HS256 JWT signed with the decoded secret, with the key id
in the ``kid`` header and ``/admin/`` as audience.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import jwt

from ...sdk import AuthError, ConnectorClient, InvocationContext

logger = logging.getLogger(__name__)

API_VERSION = "v5.0"
TOKEN_TTL_SECONDS = 300


def generate_admin_token(api_key: str, now: int | None = None) -> str:
    """
    Sign an Admin API token for ``api_key``.

    Raises:
        AuthError: If the key is not ``<id>:<hex secret>``
    """
    parts = api_key.split(":")
    if len(parts) != 2:
        raise AuthError("invalid API key format", "ghostcms")
    key_id, secret = parts
    try:
        decoded_secret = bytes.fromhex(secret)
    except ValueError as e:
        raise AuthError(f"failed to decode secret: {e}", "ghostcms") from e

    issued_at = int(time.time()) if now is None else now
    claims = {"iat": issued_at, "exp": issued_at + TOKEN_TTL_SECONDS, "aud": "/admin/"}
    return jwt.encode(claims, decoded_secret, algorithm="HS256", headers={"kid": key_id})


class GhostClient(ConnectorClient):
    """Client for the Ghost Admin API of one site."""

    def __init__(self, site_url: str, admin_api_key: str, **kwargs: Any):
        self.site_url = site_url.rstrip("/")
        super().__init__(base_url=f"{self.site_url}/ghost/api/admin", **kwargs)
        self.admin_api_key = admin_api_key

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> GhostClient:
        return cls(
            ctx.auth.require("site_url", "ghostcms", "site URL"),
            ctx.auth.require("admin_api_key", "ghostcms", "admin API key"),
            settings=ctx.settings,
            transport=ctx.transport,
        )

    @property
    def name(self) -> str:
        return "ghostcms"

    def _get_auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Ghost {generate_admin_token(self.admin_api_key)}",
            "Accept-Version": API_VERSION,
        }

    def _error_message(self, response: httpx.Response) -> str:
        try:
            errors = response.json().get("errors") or []
            message = errors[0]["message"]
        except (ValueError, AttributeError, LookupError, TypeError):
            return super()._error_message(response)
        return f"ghost API error: {message}"

    async def first(self, method: str, path: str, resource: str, **kwargs: Any) -> Any:
        """Send a request and unwrap ``<resource>[0]`` when present."""
        response = await self.request(method, path, **kwargs)
        if isinstance(response, dict):
            items = response.get(resource)
            if isinstance(items, list) and items:
                return items[0]
        return response
