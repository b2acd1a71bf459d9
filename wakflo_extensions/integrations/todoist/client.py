"""Todoist REST v2 client and option resolvers."""

from __future__ import annotations

import logging
from typing import Any

from ...sdk import ConnectorClient, DynamicFieldContext, InvocationContext, Option

logger = logging.getLogger(__name__)

API_URL = "https://api.todoist.com/rest/v2"


class TodoistClient(ConnectorClient):
    def __init__(self, token: str, **kwargs: Any):
        super().__init__(base_url=API_URL, **kwargs)
        self.token = token

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> TodoistClient:
        return cls(ctx.auth.require_token("todoist"), settings=ctx.settings, transport=ctx.transport)

    @property
    def name(self) -> str:
        return "todoist"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def list_projects(self) -> list[dict[str, Any]]:
        return self.expect_list(await self.get("/projects"), "projects")

    async def list_sections(self, project_id: str) -> list[dict[str, Any]]:
        return self.expect_list(await self.get("/sections", params={"project_id": project_id}), "sections")

    async def list_tasks(self, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        return self.expect_list(await self.get("/tasks", params=params), "tasks")


async def get_projects(ctx: DynamicFieldContext) -> list[Option]:
    async with TodoistClient.from_context(ctx) as client:
        projects = await client.list_projects()
    return ctx.respond([Option(id=p["id"], name=p.get("name", p["id"])) for p in projects])


async def get_sections(ctx: DynamicFieldContext) -> list[Option]:
    project_id = ctx.value("project_id")
    if not project_id:
        return []
    async with TodoistClient.from_context(ctx) as client:
        sections = await client.list_sections(project_id)
    return ctx.respond([Option(id=s["id"], name=s.get("name", s["id"])) for s in sections])


async def get_tasks(ctx: DynamicFieldContext) -> list[Option]:
    async with TodoistClient.from_context(ctx) as client:
        tasks = await client.list_tasks({"project_id": ctx.value("project_id")})
    return ctx.respond([Option(id=t["id"], name=t.get("content", t["id"])) for t in tasks])
