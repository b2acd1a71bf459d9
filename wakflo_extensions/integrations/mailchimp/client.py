"""
Mailchimp Marketing API client.

Mailchimp accounts live in a data center (``us6``, ``us21``...). The data
center is looked up once per client from the OAuth metadata endpoint and
all API calls go to ``https://<dc>.api.mailchimp.com/3.0``.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any

from ...sdk import ConnectorClient, DecodeError, DynamicFieldContext, InvocationContext, Option

logger = logging.getLogger(__name__)

METADATA_URL = "https://login.mailchimp.com/oauth2/metadata"
API_URL_TEMPLATE = "https://{dc}.api.mailchimp.com/3.0"

MEMBER_STATUSES = [
    ("subscribed", "Subscribed"),
    ("unsubscribed", "Unsubscribed"),
    ("cleaned", "Cleaned"),
    ("pending", "Pending"),
    ("transactional", "Transactional"),
]


def subscriber_hash(email: str) -> str:
    """MD5 of the lowercased email, as Mailchimp uses for member ids."""
    return hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()


class MailchimpClient(ConnectorClient):
    """Client for the Mailchimp Marketing API."""

    def __init__(self, token: str, *, server_prefix: str | None = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.token = token
        self._server_prefix = server_prefix

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> MailchimpClient:
        return cls(
            ctx.auth.require_token("mailchimp"),
            server_prefix=ctx.auth.get("server-prefix"),
            settings=ctx.settings,
            transport=ctx.transport,
        )

    @property
    def name(self) -> str:
        return "mailchimp"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def server_prefix(self) -> str:
        """Resolve (and remember) the account's data center."""
        if self._server_prefix:
            return self._server_prefix

        metadata = await self.get(METADATA_URL, headers={"Authorization": f"OAuth {self.token}"})
        dc = metadata.get("dc") if isinstance(metadata, dict) else None
        if not dc:
            raise DecodeError("data center (dc) not found in the metadata response", self.name)
        logger.debug(f"[mailchimp] Resolved data center: {dc}")
        self._server_prefix = dc
        return dc

    async def api(self, method: str, path: str, **kwargs: Any) -> Any:
        """Call ``/3.0<path>`` in the account's data center."""
        base = API_URL_TEMPLATE.format(dc=await self.server_prefix())
        return await self.request(method, f"{base}{path}", **kwargs)

    # =========================================================================
    # Lists and members
    # =========================================================================

    async def list_audiences(self) -> list[dict[str, Any]]:
        data = await self.api("GET", "/lists", params={"count": 1000, "fields": "lists.id,lists.name"})
        return self.expect_object(data, "lists").get("lists") or []

    async def add_member(self, list_id: str, payload: dict[str, Any]) -> Any:
        logger.info(f"[mailchimp] Adding member to list {list_id}")
        return await self.api("POST", f"/lists/{list_id}/members", json=payload)

    async def update_member(self, list_id: str, email: str, payload: dict[str, Any]) -> Any:
        return await self.api("PATCH", f"/lists/{list_id}/members/{subscriber_hash(email)}", json=payload)

    async def set_tags(self, list_id: str, email: str, tags: list[str], status: str) -> Any:
        """Add (``active``) or remove (``inactive``) tags on a member."""
        logger.info(f"[mailchimp] Setting {len(tags)} tag(s) to {status} on list {list_id}")
        return await self.api(
            "POST",
            f"/lists/{list_id}/members/{subscriber_hash(email)}/tags",
            json={"tags": [{"name": tag, "status": status} for tag in tags]},
        )

    async def add_note(self, list_id: str, email: str, note: str) -> Any:
        return await self.api(
            "POST",
            f"/lists/{list_id}/members/{subscriber_hash(email)}/notes",
            json={"note": note},
        )

    async def list_members(self, list_id: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        data = await self.api("GET", f"/lists/{list_id}/members", params=params)
        return self.expect_object(data, "members").get("members") or []


async def get_audiences(ctx: DynamicFieldContext) -> list[Option]:
    async with MailchimpClient.from_context(ctx) as client:
        lists = await client.list_audiences()
    return ctx.respond([Option(id=item["id"], name=item.get("name", item["id"])) for item in lists])
