"""Telegram bot actions."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any, Literal

from pydantic import Field

from ...sdk import (
    JSON,
    Action,
    ActionMetadata,
    Blankable,
    FormBuilder,
    FormSchema,
    InputValidationError,
    PerformContext,
    RequiredStr,
    StepInput,
    parse_input,
)
from ...sdk.inputs import drop_empty
from ...sdk.polling import utc_now
from .client import TelegramClient

INTEGRATION = "telegrambot"

MAX_INVITE_NAME_LENGTH = 32
MAX_MEMBER_LIMIT = 99999

PARSE_MODES = [("Markdown", "Markdown"), ("MarkdownV2", "MarkdownV2"), ("HTML", "HTML")]

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION = re.compile(r"^(?:\d+(?:\.\d+)?(?:ms|s|m|h))+$")
_DAYS = re.compile(r"^(\d+)d$")
_UNITS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600}

_DATE_FORMATS = ("%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d")

ParseMode = Annotated[Literal["Markdown", "MarkdownV2", "HTML"] | None, Blankable]


def parse_duration(text: str) -> timedelta | None:
    """Parse ``7d``, ``1h``, ``30m`` or compound ``1h30m`` durations."""
    days = _DAYS.match(text)
    if days:
        return timedelta(days=int(days.group(1)))
    if not _DURATION.match(text):
        return None
    seconds = sum(float(amount) * _UNITS[unit] for amount, unit in _DURATION_PART.findall(text))
    return timedelta(seconds=seconds)


def parse_expire_date(text: str, now: datetime | None = None) -> int:
    """
    Resolve an invite link expiry to a Unix timestamp.

    Durations are relative to now; absolute dates may be RFC 3339,
    ``YYYY-MM-DD HH:MM:SS`` or ``YYYY-MM-DD`` (UTC).

    Raises:
        ValueError: If the value matches no supported format
    """
    text = text.strip()
    duration = parse_duration(text)
    if duration is not None:
        return int(((now or utc_now()) + duration).timestamp())

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if "T" in text and parsed.tzinfo is not None:
            return int(parsed.timestamp())
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return int(datetime.strptime(text, fmt).replace(tzinfo=UTC).timestamp())
        except ValueError:
            continue

    raise ValueError(
        "unrecognized date format. Use ISO 8601 (2024-12-31T23:59:59Z) or duration (1h, 30m, 7d)"
    )


def _chat_form(form_id: str, title: str) -> FormBuilder:
    return FormBuilder(form_id, title).text(
        "chat_id",
        "Chat ID",
        required=True,
        description="Unique identifier of the chat or @username of the channel.",
    )


# =============================================================================
# Messages
# =============================================================================


class SendMessageInput(StepInput):
    chat_id: RequiredStr
    text: RequiredStr
    parse_mode: ParseMode = None
    disable_web_page_preview: bool = False
    disable_notification: bool = False
    reply_to_message_id: Annotated[str | None, Blankable] = None


class SendTextMessageAction(Action):
    metadata = ActionMetadata(
        id="send_text_message",
        display_name="Send Text Message",
        description="Sends a text message to a chat.",
        sample_output={
            "message_id": 1234,
            "chat": {"id": -1001234567890, "type": "supergroup", "title": "Team"},
            "date": 1714550400,
            "text": "Deployment finished",
        },
    )

    def properties(self) -> FormSchema:
        return (
            _chat_form("send_text_message", "Send Text Message")
            .long_text("text", "Message", required=True)
            .select("parse_mode", "Parse Mode", PARSE_MODES)
            .checkbox("disable_web_page_preview", "Disable Link Preview", default=False)
            .checkbox("disable_notification", "Send Silently", default=False)
            .text("reply_to_message_id", "Reply To Message ID")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(SendMessageInput, ctx.input, INTEGRATION)
        params: dict[str, Any] = {
            "chat_id": data.chat_id,
            "text": data.text,
            "parse_mode": data.parse_mode,
            "reply_to_message_id": data.reply_to_message_id,
        }
        if data.disable_web_page_preview:
            params["disable_web_page_preview"] = True
        if data.disable_notification:
            params["disable_notification"] = True

        async with TelegramClient.from_context(ctx) as client:
            return await client.call("sendMessage", drop_empty(params))


class SendPhotoInput(StepInput):
    chat_id: RequiredStr
    photo_url: RequiredStr
    caption: Annotated[str | None, Blankable] = None
    parse_mode: ParseMode = None
    disable_notification: bool = False
    reply_to_message_id: Annotated[str | None, Blankable] = None


class SendPhotoAction(Action):
    metadata = ActionMetadata(
        id="send_photo",
        display_name="Send Photo",
        description="Sends a photo by URL to a chat.",
        sample_output={
            "message_id": 1235,
            "chat": {"id": -1001234567890, "type": "supergroup"},
            "photo": [{"file_id": "AgACAgQAAxkBAAIB", "width": 320, "height": 240}],
            "caption": "Release notes",
        },
    )

    def properties(self) -> FormSchema:
        return (
            _chat_form("send_photo", "Send Photo")
            .url("photo_url", "Photo URL", required=True)
            .long_text("caption", "Caption")
            .select("parse_mode", "Parse Mode", PARSE_MODES)
            .checkbox("disable_notification", "Send Silently", default=False)
            .text("reply_to_message_id", "Reply To Message ID")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(SendPhotoInput, ctx.input, INTEGRATION)
        params: dict[str, Any] = {
            "chat_id": data.chat_id,
            "photo": data.photo_url,
            "caption": data.caption,
            "parse_mode": data.parse_mode,
            "reply_to_message_id": data.reply_to_message_id,
        }
        if data.disable_notification:
            params["disable_notification"] = True

        async with TelegramClient.from_context(ctx) as client:
            return await client.call("sendPhoto", drop_empty(params))


# =============================================================================
# Invite links
# =============================================================================


class CreateInviteLinkInput(StepInput):
    chat_id: RequiredStr
    name: Annotated[str | None, Blankable] = Field(default=None, max_length=MAX_INVITE_NAME_LENGTH)
    expire_date: Annotated[str | None, Blankable] = None
    member_limit: Annotated[int | None, Blankable] = Field(default=None, ge=1, le=MAX_MEMBER_LIMIT)
    creates_join_request: bool = False


class CreateInviteLinkAction(Action):
    metadata = ActionMetadata(
        id="create_invite_link",
        display_name="Create Invite Link",
        description="Creates an additional invite link for a chat. The bot must be an administrator.",
        sample_output={
            "invite_link": "https://t.me/+AbCdEfGhIjKlMnOp",
            "name": "Spring campaign",
            "creator": {"id": 123456789, "is_bot": True, "first_name": "Wakflo Bot"},
            "creates_join_request": False,
            "is_primary": False,
            "is_revoked": False,
            "expire_date": 1735689599,
        },
    )

    def properties(self) -> FormSchema:
        return (
            _chat_form("create_invite_link", "Create Invite Link")
            .text("name", "Name", description="Invite link name, up to 32 characters.")
            .text(
                "expire_date",
                "Expire Date",
                description="Duration (1h, 30m, 7d) or date (2024-12-31T23:59:59Z).",
            )
            .number("member_limit", "Member Limit", description="1-99999 members can join via this link.")
            .checkbox(
                "creates_join_request",
                "Creates Join Request",
                default=False,
                description="Users joining via the link must be approved. Cannot be combined with a member limit.",
            )
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreateInviteLinkInput, ctx.input, INTEGRATION)

        params: dict[str, Any] = {"chat_id": data.chat_id}
        if data.name:
            params["name"] = data.name

        if data.expire_date:
            try:
                params["expire_date"] = parse_expire_date(data.expire_date)
            except ValueError as e:
                raise InputValidationError(f"invalid expire date format: {e}", INTEGRATION) from e

        if data.member_limit is not None:
            if data.creates_join_request:
                raise InputValidationError("cannot use member_limit with creates_join_request", INTEGRATION)
            params["member_limit"] = data.member_limit

        if data.creates_join_request:
            params["creates_join_request"] = True

        async with TelegramClient.from_context(ctx) as client:
            return await client.call("createChatInviteLink", params)


# =============================================================================
# Chat members
# =============================================================================


class ChatMemberInput(StepInput):
    chat_id: RequiredStr
    user_id: RequiredStr


class GetChatMemberAction(Action):
    metadata = ActionMetadata(
        id="get_chat_member",
        display_name="Get Chat Member",
        description="Gets information about a member of a chat.",
        sample_output={
            "status": "member",
            "user": {"id": 987654321, "is_bot": False, "first_name": "Ada", "username": "ada"},
        },
    )

    def properties(self) -> FormSchema:
        return (
            _chat_form("get_chat_member", "Get Chat Member")
            .text("user_id", "User ID", required=True)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(ChatMemberInput, ctx.input, INTEGRATION)
        async with TelegramClient.from_context(ctx) as client:
            return await client.call("getChatMember", {"chat_id": data.chat_id, "user_id": data.user_id})


class ChatInput(StepInput):
    chat_id: RequiredStr


class GetChatAdministratorsAction(Action):
    metadata = ActionMetadata(
        id="get_chat_administrators",
        display_name="Get Chat Administrators",
        description="Lists the administrators of a chat.",
        sample_output=[
            {"status": "creator", "user": {"id": 111, "is_bot": False, "first_name": "Grace"}},
            {"status": "administrator", "user": {"id": 123456789, "is_bot": True, "first_name": "Wakflo Bot"}},
        ],
    )

    def properties(self) -> FormSchema:
        return _chat_form("get_chat_administrators", "Get Chat Administrators").build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(ChatInput, ctx.input, INTEGRATION)
        async with TelegramClient.from_context(ctx) as client:
            return await client.call("getChatAdministrators", {"chat_id": data.chat_id})
