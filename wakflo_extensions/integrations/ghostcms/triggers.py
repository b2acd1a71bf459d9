"""Ghost CMS triggers."""

from __future__ import annotations

from typing import Annotated

from ...sdk import (
    JSON,
    Blankable,
    ExecuteContext,
    FormBuilder,
    FormSchema,
    StepInput,
    Trigger,
    TriggerMetadata,
    filter_since,
    parse_input,
)
from ...sdk.polling import rfc3339
from .actions import POST_STATUSES, SAMPLE_POST
from .client import GhostClient

INTEGRATION = "ghostcms"


class NewPostInput(StepInput):
    status: str = "all"
    include: Annotated[str | None, Blankable] = "authors,tags"


class NewPostTrigger(Trigger):
    """Posts created since the last run, oldest first."""

    metadata = TriggerMetadata(
        id="new_post",
        display_name="New Post",
        description="Triggers when a new post is created.",
        sample_output=[SAMPLE_POST],
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("new_post", "New Post")
            .select("status", "Status Filter", [("all", "All"), *POST_STATUSES], default="all")
            .text("include", "Include Relations", default="authors,tags")
            .build()
        )

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(NewPostInput, ctx.input, INTEGRATION)
        last_run = ctx.last_run

        filters = []
        if data.status and data.status != "all":
            filters.append(f"status:{data.status}")
        if last_run is not None:
            filters.append(f"created_at:>'{rfc3339(last_run)}'")

        params = {
            "limit": 100,
            "order": "created_at desc",
            "include": data.include,
            "filter": "+".join(filters) or None,
        }
        async with GhostClient.from_context(ctx) as client:
            response = client.expect_object(await client.get("/posts/", params=params), "posts")
            posts = client.expect_list(response.get("posts", []), "posts")

        posts = filter_since(posts, last_run, "created_at")
        return list(reversed(posts))
