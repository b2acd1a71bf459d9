"""Telegram bot triggers."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from ...sdk import (
    JSON,
    Blankable,
    DecodeError,
    ExecuteContext,
    FormBuilder,
    FormSchema,
    StepInput,
    Trigger,
    TriggerMetadata,
    filter_since,
    parse_input,
)
from .client import TelegramClient

INTEGRATION = "telegrambot"

LAST_UPDATE_ID_KEY = "lastUpdateID"
UPDATES_LIMIT = 100

CHAT_TYPES = [
    ("private", "Private"),
    ("group", "Group"),
    ("supergroup", "Supergroup"),
    ("channel", "Channel"),
]


class MessageReceivedInput(StepInput):
    filter_chat_type: Annotated[Literal["private", "group", "supergroup", "channel"] | None, Blankable] = None
    filter_chat_id: Annotated[str | None, Blankable] = None


def _chat(update: dict[str, Any]) -> dict[str, Any]:
    message = update.get("message") or {}
    return message.get("chat") or {}


class MessageReceivedTrigger(Trigger):
    """
    New messages sent to the bot.

    Uses two cursors: Telegram's ``update_id`` offset (stored as
    ``lastUpdateID`` in trigger metadata) so acknowledged updates are not
    fetched again, and the host's ``lastRun`` to drop messages older than
    the previous poll.
    """

    metadata = TriggerMetadata(
        id="message_received",
        display_name="Message Received",
        description="Triggers when the bot receives a new message.",
        sample_output={
            "messages": [
                {
                    "update_id": 100000001,
                    "message": {
                        "message_id": 42,
                        "from": {"id": 987654321, "is_bot": False, "first_name": "Ada"},
                        "chat": {"id": 987654321, "type": "private"},
                        "date": 1714550400,
                        "text": "hello",
                    },
                }
            ],
            "lastUpdateID": 100000001,
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("message_received", "Message Received")
            .select("filter_chat_type", "Chat Type", CHAT_TYPES, description="Only messages from this chat type.")
            .text("filter_chat_id", "Chat ID", description="Only messages from this chat.")
            .build()
        )

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(MessageReceivedInput, ctx.input, INTEGRATION)

        last_update_id = ctx.get_metadata(LAST_UPDATE_ID_KEY)
        offset = int(last_update_id) + 1 if last_update_id is not None else 0

        async with TelegramClient.from_context(ctx) as client:
            result = await client.call(
                "getUpdates",
                {"offset": offset, "limit": UPDATES_LIMIT, "timeout": 0},
            )

        if not isinstance(result, list):
            raise DecodeError("invalid response format: result field is not an array", INTEGRATION)

        if not result:
            return {"messages": [], "lastUpdateID": offset - 1}

        new_last_update_id = int(result[-1]["update_id"])

        updates = [u for u in result if isinstance(u.get("message"), dict)]
        if data.filter_chat_type:
            updates = [u for u in updates if _chat(u).get("type") == data.filter_chat_type]
        if data.filter_chat_id:
            updates = [u for u in updates if str(_chat(u).get("id")) == data.filter_chat_id]

        messages = filter_since(updates, ctx.last_run, "message.date")

        ctx.set_metadata(LAST_UPDATE_ID_KEY, new_last_update_id)
        return {"messages": messages, "lastUpdateID": new_last_update_id}
