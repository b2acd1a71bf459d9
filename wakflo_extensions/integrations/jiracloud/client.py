"""
Jira Cloud REST API client.

Uses HTTP Basic with the account email and an API token against the
instance URL stored in the connection (e.g. https://example.atlassian.net).
"""

from __future__ import annotations

import base64
import logging
from typing import Any

from ...sdk import JSON, ConnectorClient, DynamicFieldContext, InvocationContext, Option

logger = logging.getLogger(__name__)

SEARCH_PATH = "/rest/api/3/search"


def adf_document(text: str) -> dict[str, Any]:
    """Wrap plain text in an Atlassian Document Format paragraph."""
    return {
        "type": "doc",
        "version": 1,
        "content": [{"type": "paragraph", "content": [{"type": "text", "text": text}]}],
    }


class JiraClient(ConnectorClient):
    """Client for one Jira Cloud site."""

    def __init__(self, instance_url: str, email: str, api_token: str, **kwargs: Any):
        super().__init__(base_url=instance_url.rstrip("/"), **kwargs)
        self.email = email
        self.api_token = api_token

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> JiraClient:
        return cls(
            ctx.auth.require("instance-url", "jiracloud", "instance URL"),
            ctx.auth.require("email", "jiracloud"),
            ctx.auth.require("api-token", "jiracloud", "API token"),
            settings=ctx.settings,
            transport=ctx.transport,
        )

    @property
    def name(self) -> str:
        return "jiracloud"

    def _get_auth_headers(self) -> dict[str, str]:
        credentials = base64.b64encode(f"{self.email}:{self.api_token}".encode()).decode()
        return {"Authorization": f"Basic {credentials}"}

    async def call(self, method: str, path: str, message: str = "", **kwargs: Any) -> JSON:
        """
        Like ``request`` but a 204 response yields ``{"Result": message}``.

        Jira answers most writes with No Content.
        """
        response = await self.send(method, path, **kwargs)
        if response.status_code == 204:
            return {"Result": message}
        return self._decode(response)

    async def search(self, jql: str, fields: list[str], max_results: int = 50) -> dict[str, Any]:
        result = await self.post(SEARCH_PATH, json={"jql": jql, "maxResults": max_results, "fields": fields})
        return self.expect_object(result, "search")


# =============================================================================
# Dynamic options
# =============================================================================


async def get_projects(ctx: DynamicFieldContext) -> list[Option]:
    async with JiraClient.from_context(ctx) as client:
        result = client.expect_object(await client.get("/rest/api/3/project/search"), "projects")
    return ctx.respond([Option(id=p["id"], name=p.get("name", p["id"])) for p in result.get("values", [])])


async def get_issue_types(ctx: DynamicFieldContext) -> list[Option]:
    project_id = ctx.value("projectId")
    if not project_id:
        return []
    async with JiraClient.from_context(ctx) as client:
        types = client.expect_list(
            await client.get("/rest/api/3/issuetype/project", params={"projectId": project_id}), "issue types"
        )
    return ctx.respond([Option(id=t["id"], name=t.get("name", t["id"])) for t in types])


async def get_users(ctx: DynamicFieldContext) -> list[Option]:
    """Assignable people; app and customer accounts are skipped."""
    async with JiraClient.from_context(ctx) as client:
        users = client.expect_list(await client.get("/rest/api/3/users/search"), "users")
    return ctx.respond(
        [
            Option(id=u["accountId"], name=u.get("displayName", u["accountId"]))
            for u in users
            if u.get("accountType") == "atlassian"
        ]
    )


async def get_issues(ctx: DynamicFieldContext) -> list[Option]:
    project_id = ctx.value("projectId")
    if not project_id:
        return []
    async with JiraClient.from_context(ctx) as client:
        result = await client.search(f"project={project_id}", ["summary"])
    return ctx.respond(
        [
            Option(id=i["id"], name=f"[{i.get('key')}] {i.get('fields', {}).get('summary', '')}")
            for i in result.get("issues", [])
        ]
    )


async def get_transitions(ctx: DynamicFieldContext) -> list[Option]:
    issue_id = ctx.value("issueId")
    if not issue_id:
        return []
    async with JiraClient.from_context(ctx) as client:
        result = client.expect_object(await client.get(f"/rest/api/3/issue/{issue_id}/transitions"), "transitions")
    return ctx.respond(
        [
            Option(id=t["id"], name=f"{t.get('name', '')} → {t.get('to', {}).get('name', '')}")
            for t in result.get("transitions", [])
        ]
    )
