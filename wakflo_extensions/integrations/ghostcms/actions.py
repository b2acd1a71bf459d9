"""Ghost CMS actions."""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import Field, field_validator

from ...sdk import (
    JSON,
    Action,
    ActionMetadata,
    Blankable,
    FieldType,
    FormBuilder,
    FormSchema,
    PerformContext,
    RequiredStr,
    StepInput,
    parse_input,
)
from ...sdk.inputs import split_csv
from .client import GhostClient

INTEGRATION = "ghostcms"

CONTENT_FORMATS = [("html", "HTML"), ("markdown", "Markdown"), ("lexical", "Lexical")]
POST_STATUSES = [("draft", "Draft"), ("published", "Published"), ("scheduled", "Scheduled")]

SAMPLE_POST = {
    "id": "5ddc9141c35e7700383b2937",
    "title": "Welcome",
    "slug": "welcome",
    "status": "draft",
    "created_at": "2024-05-01T10:00:00.000Z",
    "updated_at": "2024-05-01T10:00:00.000Z",
    "url": "https://demo.ghost.io/p/welcome/",
}


def content_fields(content: str, content_format: str) -> dict[str, Any]:
    """Map post content to the Ghost field for its format."""
    if content_format == "markdown":
        mobiledoc = {
            "version": "0.3.1",
            "atoms": [],
            "cards": [["markdown", {"markdown": content}]],
            "markups": [],
            "sections": [[10, 0]],
        }
        return {"mobiledoc": json.dumps(mobiledoc)}
    if content_format == "lexical":
        return {"lexical": content}
    return {"html": content}


class _PostFields(StepInput):
    slug: Annotated[str | None, Blankable] = None
    content_format: str = "html"
    feature_image: Annotated[str | None, Blankable] = None
    custom_excerpt: Annotated[str | None, Blankable] = None
    meta_title: Annotated[str | None, Blankable] = None
    meta_description: Annotated[str | None, Blankable] = None
    tags: list[str] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list)

    @field_validator("tags", "authors", mode="before")
    @classmethod
    def split_lists(cls, value: Any) -> list[str]:
        return split_csv(value)

    def optional_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            key: getattr(self, key)
            for key in ("slug", "feature_image", "custom_excerpt", "meta_title", "meta_description")
            if getattr(self, key)
        }
        if self.tags:
            fields["tags"] = [{"name": tag} for tag in self.tags]
        if self.authors:
            fields["authors"] = [{"id": author} for author in self.authors]
        return fields


# =============================================================================
# Posts
# =============================================================================


class CreatePostInput(_PostFields):
    title: RequiredStr
    content: RequiredStr
    status: str = "draft"
    featured: bool = False
    og_title: Annotated[str | None, Blankable] = None
    og_description: Annotated[str | None, Blankable] = None
    twitter_title: Annotated[str | None, Blankable] = None
    twitter_description: Annotated[str | None, Blankable] = None
    codeinjection_head: Annotated[str | None, Blankable] = None
    codeinjection_foot: Annotated[str | None, Blankable] = None
    email_subject: Annotated[str | None, Blankable] = None
    send_email_when_published: bool = False


class CreatePostAction(Action):
    metadata = ActionMetadata(
        id="create_post",
        display_name="Create Post",
        description="Creates a new post.",
        sample_output=SAMPLE_POST,
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("create_post", "Create Post")
            .text("title", "Title", required=True)
            .long_text("content", "Content", required=True)
            .select("content_format", "Content Format", CONTENT_FORMATS, default="html")
            .text("slug", "Slug")
            .select("status", "Status", POST_STATUSES, required=True, default="draft")
            .checkbox("featured", "Featured", default=False)
            .url("feature_image", "Feature Image URL")
            .long_text("custom_excerpt", "Custom Excerpt")
            .array("tags", "Tags")
            .array("authors", "Author IDs")
            .text("meta_title", "Meta Title")
            .long_text("meta_description", "Meta Description")
            .text("og_title", "Open Graph Title")
            .long_text("og_description", "Open Graph Description")
            .text("twitter_title", "Twitter Title")
            .long_text("twitter_description", "Twitter Description")
            .long_text("codeinjection_head", "Code Injection - Head")
            .long_text("codeinjection_foot", "Code Injection - Footer")
            .text("email_subject", "Email Subject")
            .checkbox("send_email_when_published", "Send Email When Published", default=False)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreatePostInput, ctx.input, INTEGRATION)

        post: dict[str, Any] = {
            "title": data.title,
            "status": data.status,
            "featured": data.featured,
            **content_fields(data.content, data.content_format),
            **data.optional_fields(),
        }
        for key in (
            "og_title",
            "og_description",
            "twitter_title",
            "twitter_description",
            "codeinjection_head",
            "codeinjection_foot",
            "email_subject",
        ):
            if getattr(data, key):
                post[key] = getattr(data, key)
        if data.send_email_when_published and data.status == "published":
            post["send_email_when_published"] = "all"

        async with GhostClient.from_context(ctx) as client:
            return await client.first("POST", "/posts/", "posts", json={"posts": [post]})


class UpdatePostInput(_PostFields):
    post_id: RequiredStr
    title: Annotated[str | None, Blankable] = None
    content: Annotated[str | None, Blankable] = None
    status: Annotated[str | None, Blankable] = None
    featured: Annotated[bool | None, Blankable] = None


class UpdatePostAction(Action):
    """
    Update a post.

    Ghost rejects updates without the post's current ``updated_at``, so
    the post is read first.
    """

    metadata = ActionMetadata(
        id="update_post",
        display_name="Update Post",
        description="Updates an existing post.",
        sample_output={**SAMPLE_POST, "status": "published"},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("update_post", "Update Post")
            .text("post_id", "Post ID", required=True)
            .text("title", "Title")
            .long_text("content", "Content")
            .select("content_format", "Content Format", CONTENT_FORMATS, default="html")
            .text("slug", "Slug")
            .select("status", "Status", POST_STATUSES)
            .checkbox("featured", "Featured")
            .url("feature_image", "Feature Image URL")
            .long_text("custom_excerpt", "Custom Excerpt")
            .array("tags", "Tags")
            .array("authors", "Author IDs")
            .text("meta_title", "Meta Title")
            .long_text("meta_description", "Meta Description")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(UpdatePostInput, ctx.input, INTEGRATION)

        async with GhostClient.from_context(ctx) as client:
            current = client.expect_object(
                await client.first("GET", f"/posts/{data.post_id}/", "posts"), "post"
            )

            update: dict[str, Any] = {"updated_at": current.get("updated_at"), **data.optional_fields()}
            if data.title:
                update["title"] = data.title
            if data.content:
                update.update(content_fields(data.content, data.content_format))
            if data.status:
                update["status"] = data.status
            if data.featured is not None:
                update["featured"] = data.featured

            return await client.first("PUT", f"/posts/{data.post_id}/", "posts", json={"posts": [update]})


class ListPostsInput(StepInput):
    limit: int = Field(default=15, ge=1)
    page: int = Field(default=1, ge=1)
    status: str = "all"
    filter: Annotated[str | None, Blankable] = None
    order: str = "published_at desc"
    include: Annotated[str | None, Blankable] = None
    fields: Annotated[str | None, Blankable] = None
    formats: Annotated[str | None, Blankable] = None


class ListPostsAction(Action):
    metadata = ActionMetadata(
        id="list_posts",
        display_name="List Posts",
        description="Lists posts with optional filtering and ordering.",
        sample_output={
            "posts": [SAMPLE_POST],
            "meta": {"pagination": {"page": 1, "limit": 15, "pages": 1, "total": 1}},
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("list_posts", "List Posts")
            .number("limit", "Limit", default=15)
            .number("page", "Page", default=1)
            .select("status", "Status Filter", [("all", "All"), *POST_STATUSES], default="all")
            .text("filter", "Custom Filter", description="NQL filter, e.g. tag:news+featured:true")
            .select(
                "order",
                "Order",
                [
                    ("published_at desc", "Newest Published"),
                    ("published_at asc", "Oldest Published"),
                    ("created_at desc", "Newest Created"),
                    ("created_at asc", "Oldest Created"),
                    ("title asc", "Title A-Z"),
                ],
                default="published_at desc",
            )
            .text("include", "Include", placeholder="authors,tags")
            .text("fields", "Fields")
            .text("formats", "Formats", default="html")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(ListPostsInput, ctx.input, INTEGRATION)

        filters = []
        if data.status != "all":
            filters.append(f"status:{data.status}")
        if data.filter:
            filters.append(data.filter)

        params = {
            "limit": data.limit,
            "page": data.page,
            "filter": "+".join(filters) or None,
            "order": data.order,
            "include": data.include,
            "fields": data.fields,
            "formats": data.formats,
        }
        async with GhostClient.from_context(ctx) as client:
            return await client.get("/posts/", params=params)


# =============================================================================
# Members
# =============================================================================


class CreateMemberInput(StepInput):
    email: RequiredStr
    name: Annotated[str | None, Blankable] = None
    note: Annotated[str | None, Blankable] = None
    labels: list[str] = Field(default_factory=list)
    newsletters: list[str] = Field(default_factory=list)
    subscribed: bool = True
    comped: bool = False

    @field_validator("labels", "newsletters", mode="before")
    @classmethod
    def split_lists(cls, value: Any) -> list[str]:
        return split_csv(value)


class CreateMemberAction(Action):
    metadata = ActionMetadata(
        id="create_member",
        display_name="Create Member",
        description="Creates a new member (subscriber).",
        sample_output={
            "id": "624d445026833200a5801bce",
            "email": "ada@example.com",
            "name": "Ada",
            "status": "free",
            "subscribed": True,
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("create_member", "Create Member")
            .email("email", "Email", required=True)
            .text("name", "Name")
            .long_text("note", "Note")
            .array("labels", "Labels")
            .array("newsletters", "Newsletter IDs", items=FieldType.TEXT)
            .checkbox("subscribed", "Subscribed", default=True)
            .checkbox("comped", "Complimentary Subscription", default=False)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreateMemberInput, ctx.input, INTEGRATION)

        member: dict[str, Any] = {"email": data.email, "subscribed": data.subscribed, "comped": data.comped}
        if data.name:
            member["name"] = data.name
        if data.note:
            member["note"] = data.note
        if data.labels:
            member["labels"] = [{"name": label} for label in data.labels]
        if data.newsletters:
            member["newsletters"] = [{"id": newsletter} for newsletter in data.newsletters]

        async with GhostClient.from_context(ctx) as client:
            return await client.first("POST", "/members/", "members", json={"members": [member]})
