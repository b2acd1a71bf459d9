"""Discord triggers."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from ...sdk import (
    JSON,
    Blankable,
    ExecuteContext,
    FormBuilder,
    FormSchema,
    RequiredStr,
    StepInput,
    Trigger,
    TriggerMetadata,
    filter_since,
    parse_input,
)
from .client import DiscordClient, get_channels, get_guilds, snowflake_from_datetime

INTEGRATION = "discord"

MESSAGES_LIMIT = 50


class NewMessageInput(StepInput):
    guild_id: Annotated[str | None, Blankable] = Field(default=None, alias="guild-id")
    channel_id: RequiredStr = Field(alias="channel-id")
    content: Annotated[str | None, Blankable] = None


class NewMessageTrigger(Trigger):
    """Messages posted in a channel since the last run."""

    metadata = TriggerMetadata(
        id="new_message",
        display_name="New Message",
        description="Triggers when a new message is posted in a channel.",
        sample_output=[
            {
                "id": "1234567890123456789",
                "channel_id": "1012345678901234567",
                "author": {"id": "80351110224678912", "username": "ada"},
                "content": "deploy please",
                "timestamp": "2024-05-01T10:00:00.000000+00:00",
            }
        ],
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("new_message", "New Message")
            .dynamic("guild-id", "Guild", get_guilds, required=True)
            .dynamic("channel-id", "Channel", get_channels, depends_on=["guild-id"], required=True)
            .text("content", "Contains", description="Only messages containing this text.")
            .build()
        )

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(NewMessageInput, ctx.input, INTEGRATION)
        last_run = ctx.last_run

        params: dict[str, int] = {"limit": MESSAGES_LIMIT}
        if last_run is not None:
            params["after"] = snowflake_from_datetime(last_run)

        async with DiscordClient.from_context(ctx) as client:
            messages = await client.get_list(f"/channels/{data.channel_id}/messages", params=params)

        messages = [
            m
            for m in messages
            if isinstance(m, dict) and m.get("channel_id", data.channel_id) == data.channel_id
        ]
        if data.content:
            needle = data.content.lower()
            messages = [m for m in messages if needle in (m.get("content") or "").lower()]

        # Discord returns newest first.
        return list(reversed(filter_since(messages, last_run, "timestamp")))
