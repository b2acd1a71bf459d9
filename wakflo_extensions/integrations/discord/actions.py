"""Discord actions."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field

from ...sdk import (
    JSON,
    Action,
    ActionMetadata,
    Blankable,
    FormBuilder,
    FormSchema,
    PerformContext,
    RequiredStr,
    StepInput,
    parse_input,
)
from .client import DiscordClient, get_channels, get_guilds, get_roles

INTEGRATION = "discord"

MAX_MEMBERS_PAGE = 1000

CHANNEL_TYPES = [
    ("0", "Text"),
    ("2", "Voice"),
    ("4", "Category"),
    ("5", "Announcement"),
    ("13", "Stage"),
    ("15", "Forum"),
]


def _guild_form(form_id: str, title: str) -> FormBuilder:
    return FormBuilder(form_id, title).dynamic(
        "guild-id",
        "Guild",
        get_guilds,
        required=True,
        placeholder="Select a guild",
        description="The server to work with.",
    )


# =============================================================================
# Find channel
# =============================================================================


class FindChannelInput(StepInput):
    guild_id: RequiredStr = Field(alias="guild-id")
    channel_name: Annotated[str | None, Blankable] = Field(default=None, alias="channel-name")
    channel_type: Annotated[int | None, Blankable] = Field(default=None, alias="channel-type")


class FindChannelAction(Action):
    metadata = ActionMetadata(
        id="find_channel",
        display_name="Find Channel",
        description="Finds channels in a guild by name and type.",
        sample_output={
            "found": True,
            "id": "1012345678901234567",
            "name": "general",
            "type": 0,
            "guild_id": "1009876543210987654",
        },
    )

    def properties(self) -> FormSchema:
        return (
            _guild_form("find_channel", "Find Channel")
            .text(
                "channel-name",
                "Channel Name",
                description="Part of the channel name, case-insensitive. Leave empty to match all channels.",
            )
            .select("channel-type", "Channel Type", CHANNEL_TYPES, description="Only channels of this type.")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(FindChannelInput, ctx.input, INTEGRATION)

        async with DiscordClient.from_context(ctx) as client:
            channels = await client.list_channels(data.guild_id)

        needle = (data.channel_name or "").lower()
        matching = [
            c
            for c in channels
            if isinstance(c, dict)
            and needle in (c.get("name") or "").lower()
            and (data.channel_type is None or c.get("type") == data.channel_type)
        ]

        if not matching:
            return {"found": False, "message": "No channels found matching the criteria", "channels": []}
        if len(matching) == 1:
            return {**matching[0], "found": True}
        return {
            "found": True,
            "message": "Multiple channels found",
            "count": len(matching),
            "channels": matching,
        }


# =============================================================================
# Guild members
# =============================================================================


class ListGuildMembersInput(StepInput):
    guild_id: RequiredStr = Field(alias="guild-id")
    after: Annotated[str | None, Blankable] = None
    limit: Annotated[int | None, Blankable] = Field(default=None, ge=1, le=MAX_MEMBERS_PAGE)


class ListGuildMembersAction(Action):
    metadata = ActionMetadata(
        id="list_guild_members",
        display_name="List Guild Members",
        description="Lists members of a guild. Requires the server members intent.",
        sample_output={
            "members": [{"user": {"id": "80351110224678912", "username": "ada"}, "roles": [], "nick": None}],
            "count": 1,
            "guild_id": "1009876543210987654",
            "after": "",
        },
    )

    def properties(self) -> FormSchema:
        return (
            _guild_form("list_guild_members", "List Guild Members")
            .text("after", "After", description="Highest user id from the previous page.")
            .number("limit", "Limit", description="Members to return (1-1000).")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(ListGuildMembersInput, ctx.input, INTEGRATION)

        async with DiscordClient.from_context(ctx) as client:
            members = await client.get_list(
                f"/guilds/{data.guild_id}/members",
                params={"after": data.after, "limit": data.limit},
            )

        return {
            "members": members,
            "count": len(members),
            "guild_id": data.guild_id,
            "after": data.after or "",
        }


class FindGuildMemberInput(StepInput):
    guild_id: RequiredStr = Field(alias="guild-id")
    query: RequiredStr
    role_id: Annotated[str | None, Blankable] = Field(default=None, alias="role-id")


class FindGuildMemberAction(Action):
    metadata = ActionMetadata(
        id="find_guild_member",
        display_name="Find Guild Member",
        description="Searches guild members whose username or nickname starts with the query.",
        sample_output={
            "found": True,
            "count": 1,
            "members": [{"user": {"id": "80351110224678912", "username": "ada"}, "roles": ["41771983423143936"]}],
        },
    )

    def properties(self) -> FormSchema:
        return (
            _guild_form("find_guild_member", "Find Guild Member")
            .text("query", "Username", required=True, description="Username or nickname prefix.")
            .dynamic("role-id", "Role", get_roles, depends_on=["guild-id"], description="Only members with this role.")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(FindGuildMemberInput, ctx.input, INTEGRATION)

        async with DiscordClient.from_context(ctx) as client:
            members = await client.get_list(
                f"/guilds/{data.guild_id}/members/search",
                params={"query": data.query, "limit": MAX_MEMBERS_PAGE},
            )

        if data.role_id:
            members = [m for m in members if data.role_id in (m.get("roles") or [])]

        if not members:
            return {"found": False, "message": "No members found matching the criteria", "members": []}
        return {"found": True, "count": len(members), "members": members}


# =============================================================================
# Messages
# =============================================================================


class SendChannelMessageInput(StepInput):
    guild_id: Annotated[str | None, Blankable] = Field(default=None, alias="guild-id")
    channel_id: RequiredStr = Field(alias="channel-id")
    content: RequiredStr
    tts: bool = False


class SendChannelMessageAction(Action):
    metadata = ActionMetadata(
        id="send_channel_message",
        display_name="Send Channel Message",
        description="Posts a message to a channel.",
        sample_output={
            "id": "1234567890123456789",
            "channel_id": "1012345678901234567",
            "content": "Build passed",
            "timestamp": "2024-05-01T10:00:00.000000+00:00",
        },
    )

    def properties(self) -> FormSchema:
        return (
            _guild_form("send_channel_message", "Send Channel Message")
            .dynamic("channel-id", "Channel", get_channels, depends_on=["guild-id"], required=True)
            .long_text("content", "Message", required=True)
            .checkbox("tts", "Text To Speech", default=False)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(SendChannelMessageInput, ctx.input, INTEGRATION)
        payload: dict[str, Any] = {"content": data.content, "tts": data.tts}

        async with DiscordClient.from_context(ctx) as client:
            return await client.post(f"/channels/{data.channel_id}/messages", json=payload)
