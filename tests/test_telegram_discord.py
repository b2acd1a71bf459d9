"""
Tests for the Telegram bot and Discord integrations.

Tests cover:
- Invite link expiry parsing and validation
- Bot API ok/description handling
- Update offset cursor for the message trigger
- Discord channel/member lookups and the snowflake cursor
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import httpx
import pytest

from wakflo_extensions.integrations.discord.actions import (
    FindChannelAction,
    FindGuildMemberAction,
    ListGuildMembersAction,
    SendChannelMessageAction,
)
from wakflo_extensions.integrations.discord.client import DISCORD_EPOCH, snowflake_from_datetime
from wakflo_extensions.integrations.discord.triggers import NewMessageTrigger
from wakflo_extensions.integrations.telegrambot import actions as telegram_actions
from wakflo_extensions.integrations.telegrambot.actions import (
    CreateInviteLinkAction,
    SendTextMessageAction,
    parse_duration,
    parse_expire_date,
)
from wakflo_extensions.integrations.telegrambot.triggers import LAST_UPDATE_ID_KEY, MessageReceivedTrigger
from wakflo_extensions.sdk import (
    AuthContext,
    AuthError,
    ExecuteContext,
    InputValidationError,
    PerformContext,
    RemoteAPIError,
    RemoteValidationError,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
BOT = "/bot123:abc"


def telegram_ok(result):
    return {"ok": True, "result": result}


def telegram_perform(api, input):
    return PerformContext(input=input, auth=AuthContext(extra={"token": "123:abc"}), transport=api.transport)


def telegram_execute(api, input=None, metadata=None):
    return ExecuteContext(
        input=input or {},
        auth=AuthContext(extra={"token": "123:abc"}),
        metadata=metadata if metadata is not None else {},
        transport=api.transport,
    )


# =============================================================================
# Telegram: parsing
# =============================================================================


class TestExpireDate:
    """Tests for invite link expiry parsing."""

    def test_durations(self):
        assert parse_duration("1h") == timedelta(hours=1)
        assert parse_duration("1h30m") == timedelta(minutes=90)
        assert parse_duration("7d") == timedelta(days=7)
        assert parse_duration("soon") is None

    def test_relative(self):
        """Durations are added to now."""
        assert parse_expire_date("1h", now=NOW) == int(NOW.timestamp()) + 3600
        assert parse_expire_date("7d", now=NOW) == int(NOW.timestamp()) + 7 * 86400

    def test_absolute(self):
        """RFC 3339 and plain dates are read as UTC."""
        expected = int(datetime(2024, 12, 31, 23, 59, 59, tzinfo=UTC).timestamp())
        assert parse_expire_date("2024-12-31T23:59:59Z") == expected
        assert parse_expire_date("2024-12-31 23:59:59") == expected
        assert parse_expire_date("2024-12-31") == int(datetime(2024, 12, 31, tzinfo=UTC).timestamp())

    def test_malformed(self):
        with pytest.raises(ValueError, match="unrecognized date format"):
            parse_expire_date("next tuesday")


# =============================================================================
# Telegram: actions
# =============================================================================


class TestCreateInviteLink:
    """Tests for CreateInviteLinkAction."""

    @pytest.mark.asyncio
    async def test_relative_expiry(self, api):
        """A 1h expiry is sent as now + 3600."""
        api.add("POST", f"{BOT}/createChatInviteLink", telegram_ok({"invite_link": "https://t.me/+x"}))
        ctx = telegram_perform(api, {"chat_id": "-100", "name": "Spring", "expire_date": "1h"})

        with patch.object(telegram_actions, "utc_now", return_value=NOW):
            result = await CreateInviteLinkAction().perform(ctx)

        assert result == {"invite_link": "https://t.me/+x"}
        assert api.body() == {
            "chat_id": "-100",
            "name": "Spring",
            "expire_date": int(NOW.timestamp()) + 3600,
        }

    @pytest.mark.asyncio
    async def test_malformed_date_makes_no_request(self, api):
        """A malformed expiry fails before any HTTP call."""
        ctx = telegram_perform(api, {"chat_id": "-100", "expire_date": "tomorrow-ish"})

        with pytest.raises(InputValidationError, match="invalid expire date format"):
            await CreateInviteLinkAction().perform(ctx)
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_member_limit_with_join_request(self, api):
        ctx = telegram_perform(api, {"chat_id": "-100", "member_limit": 5, "creates_join_request": True})

        with pytest.raises(InputValidationError, match="member_limit"):
            await CreateInviteLinkAction().perform(ctx)

    @pytest.mark.asyncio
    async def test_zero_member_limit_rejected(self, api):
        """A member limit below 1 fails validation before any HTTP call."""
        ctx = telegram_perform(api, {"chat_id": "-100", "member_limit": 0})

        with pytest.raises(InputValidationError, match="member_limit"):
            await CreateInviteLinkAction().perform(ctx)
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_name_too_long(self, api):
        ctx = telegram_perform(api, {"chat_id": "-100", "name": "x" * 33})

        with pytest.raises(InputValidationError, match="name"):
            await CreateInviteLinkAction().perform(ctx)

    @pytest.mark.asyncio
    async def test_missing_bot_token(self, api, perform_ctx):
        ctx = perform_ctx({"chat_id": "-100"})
        with pytest.raises(AuthError, match="Telegram bot token"):
            await CreateInviteLinkAction().perform(ctx)


class TestSendTextMessage:
    """Tests for SendTextMessageAction and Bot API error handling."""

    @pytest.mark.asyncio
    async def test_sends_only_set_fields(self, api):
        api.add("POST", f"{BOT}/sendMessage", telegram_ok({"message_id": 1}))
        ctx = telegram_perform(api, {"chat_id": "42", "text": "hi", "parse_mode": "", "disable_notification": True})

        result = await SendTextMessageAction().perform(ctx)

        assert result == {"message_id": 1}
        assert api.body() == {"chat_id": "42", "text": "hi", "disable_notification": True}

    @pytest.mark.asyncio
    async def test_ok_false(self, api):
        """ok=false surfaces Telegram's description."""
        api.add("POST", f"{BOT}/sendMessage", {"ok": False, "description": "chat not found"})
        ctx = telegram_perform(api, {"chat_id": "42", "text": "hi"})

        with pytest.raises(RemoteAPIError, match="chat not found"):
            await SendTextMessageAction().perform(ctx)

    @pytest.mark.asyncio
    async def test_http_error_includes_status(self, api):
        api.add(
            "POST",
            f"{BOT}/sendMessage",
            httpx.Response(400, json={"ok": False, "description": "Bad Request: message text is empty"}),
        )
        ctx = telegram_perform(api, {"chat_id": "42", "text": "hi"})

        with pytest.raises(RemoteValidationError) as exc_info:
            await SendTextMessageAction().perform(ctx)
        assert "400" in str(exc_info.value)
        assert "message text is empty" in str(exc_info.value)


# =============================================================================
# Telegram: trigger
# =============================================================================


class TestMessageReceived:
    """Tests for MessageReceivedTrigger."""

    UPDATES = [
        {"update_id": 10, "message": {"chat": {"id": 1, "type": "private"}, "date": 1717243200, "text": "a"}},
        {"update_id": 11, "message": {"chat": {"id": 2, "type": "group"}, "date": 1717243300, "text": "b"}},
        {"update_id": 12, "edited_message": {"chat": {"id": 1}}},
    ]

    @pytest.mark.asyncio
    async def test_first_run_and_cursor(self, api):
        """The first run starts at offset 0 and stores the last update id."""
        api.add("POST", f"{BOT}/getUpdates", telegram_ok(self.UPDATES))
        ctx = telegram_execute(api)

        result = await MessageReceivedTrigger().execute(ctx)

        assert api.body()["offset"] == 0
        assert [m["update_id"] for m in result["messages"]] == [10, 11]
        assert result["lastUpdateID"] == 12
        assert ctx.metadata[LAST_UPDATE_ID_KEY] == 12

    @pytest.mark.asyncio
    async def test_offset_and_chat_filter(self, api):
        """The stored cursor becomes offset and chat filters apply."""
        api.add("POST", f"{BOT}/getUpdates", telegram_ok(self.UPDATES[:2]))
        ctx = telegram_execute(api, {"filter_chat_type": "group"}, metadata={LAST_UPDATE_ID_KEY: 9})

        result = await MessageReceivedTrigger().execute(ctx)

        assert api.body()["offset"] == 10
        assert [m["update_id"] for m in result["messages"]] == [11]

    @pytest.mark.asyncio
    async def test_no_updates(self, api):
        api.add("POST", f"{BOT}/getUpdates", telegram_ok([]))
        ctx = telegram_execute(api, metadata={LAST_UPDATE_ID_KEY: 20})

        result = await MessageReceivedTrigger().execute(ctx)

        assert result == {"messages": [], "lastUpdateID": 20}


# =============================================================================
# Discord
# =============================================================================


class TestSnowflake:
    def test_epoch_is_zero(self):
        assert snowflake_from_datetime(DISCORD_EPOCH) == 0

    def test_shifted_millis(self):
        assert snowflake_from_datetime(DISCORD_EPOCH + timedelta(milliseconds=1)) == 1 << 22


class TestDiscordActions:
    """Tests for Discord actions."""

    CHANNELS = [
        {"id": "c1", "name": "general", "type": 0},
        {"id": "c2", "name": "random", "type": 0},
    ]
    MIXED_CHANNELS = [
        {"id": "c1", "name": "general", "type": 0},
        {"id": "c3", "name": "General Voice", "type": 2},
        {"id": "c4", "name": "announcements", "type": 5},
    ]

    @pytest.mark.asyncio
    async def test_find_single_channel(self, api, perform_ctx):
        """A single match is returned flat with found=True."""
        api.add("GET", "/api/v10/guilds/g1/channels", self.CHANNELS)
        ctx = perform_ctx({"guild-id": "g1", "channel-name": "general"})

        result = await FindChannelAction().perform(ctx)

        assert result == {"id": "c1", "name": "general", "type": 0, "found": True}
        assert api.last.headers["Authorization"] == "Bot test-token"

    @pytest.mark.asyncio
    async def test_find_channel_by_partial_name(self, api, perform_ctx):
        """Names match on a case-insensitive substring."""
        api.add("GET", "/api/v10/guilds/g1/channels", self.MIXED_CHANNELS)

        result = await FindChannelAction().perform(perform_ctx({"guild-id": "g1", "channel-name": "GEN"}))

        assert result["count"] == 2
        assert [c["id"] for c in result["channels"]] == ["c1", "c3"]

    @pytest.mark.asyncio
    async def test_find_channel_by_type(self, api, perform_ctx):
        """The channel type narrows the name match."""
        api.add("GET", "/api/v10/guilds/g1/channels", self.MIXED_CHANNELS)
        ctx = perform_ctx({"guild-id": "g1", "channel-name": "gen", "channel-type": "2"})

        result = await FindChannelAction().perform(ctx)

        assert result == {"id": "c3", "name": "General Voice", "type": 2, "found": True}

    @pytest.mark.asyncio
    async def test_find_channel_type_only(self, api, perform_ctx):
        api.add("GET", "/api/v10/guilds/g1/channels", self.MIXED_CHANNELS)
        ctx = perform_ctx({"guild-id": "g1", "channel-name": "", "channel-type": "5"})

        result = await FindChannelAction().perform(ctx)

        assert result["id"] == "c4"

    @pytest.mark.asyncio
    async def test_find_all_channels(self, api, perform_ctx):
        api.add("GET", "/api/v10/guilds/g1/channels", self.CHANNELS)
        result = await FindChannelAction().perform(perform_ctx({"guild-id": "g1"}))
        assert result["count"] == 2
        assert result["message"] == "Multiple channels found"

    @pytest.mark.asyncio
    async def test_find_channel_none(self, api, perform_ctx):
        api.add("GET", "/api/v10/guilds/g1/channels", [])
        result = await FindChannelAction().perform(perform_ctx({"guild-id": "g1", "channel-name": "x"}))
        assert result["found"] is False

    @pytest.mark.asyncio
    async def test_list_members(self, api, perform_ctx):
        api.add("GET", "/api/v10/guilds/g1/members", [{"user": {"id": "u1"}}])
        result = await ListGuildMembersAction().perform(perform_ctx({"guild-id": "g1", "limit": 10}))

        assert result == {"members": [{"user": {"id": "u1"}}], "count": 1, "guild_id": "g1", "after": ""}
        assert api.last.url.params["limit"] == "10"

    @pytest.mark.asyncio
    async def test_find_member_by_role(self, api, perform_ctx):
        api.add(
            "GET",
            "/api/v10/guilds/g1/members/search",
            [{"user": {"id": "u1"}, "roles": ["r1"]}, {"user": {"id": "u2"}, "roles": []}],
        )
        ctx = perform_ctx({"guild-id": "g1", "query": "ad", "role-id": "r1"})

        result = await FindGuildMemberAction().perform(ctx)

        assert result["count"] == 1
        assert result["members"][0]["user"]["id"] == "u1"

    @pytest.mark.asyncio
    async def test_send_message_error(self, api, perform_ctx):
        """Discord errors include the status code."""
        api.add("POST", "/api/v10/channels/c1/messages", httpx.Response(403, json={"message": "Missing Access"}))
        ctx = perform_ctx({"channel-id": "c1", "content": "hi"})

        with pytest.raises(RemoteAPIError) as exc_info:
            await SendChannelMessageAction().perform(ctx)
        assert "Status Code: 403" in str(exc_info.value)


class TestNewMessageTrigger:
    """Tests for NewMessageTrigger."""

    MESSAGES = [
        {"id": "3", "channel_id": "c1", "content": "Deploy now", "timestamp": "2024-06-01T12:30:00.000000+00:00"},
        {"id": "2", "channel_id": "c1", "content": "hello", "timestamp": "2024-06-01T11:30:00.000000+00:00"},
    ]

    @pytest.mark.asyncio
    async def test_first_run_oldest_first(self, api, execute_ctx):
        """Without lastRun no after cursor is sent and messages come oldest first."""
        api.add("GET", "/api/v10/channels/c1/messages", self.MESSAGES)

        result = await NewMessageTrigger().execute(execute_ctx({"guild-id": "g1", "channel-id": "c1"}))

        assert [m["id"] for m in result] == ["2", "3"]
        assert "after" not in api.last.url.params

    @pytest.mark.asyncio
    async def test_since_last_run_with_content_filter(self, api, execute_ctx):
        api.add("GET", "/api/v10/channels/c1/messages", self.MESSAGES)
        ctx = execute_ctx({"channel-id": "c1", "content": "deploy"}, metadata={"lastRun": NOW})

        result = await NewMessageTrigger().execute(ctx)

        assert [m["id"] for m in result] == ["3"]
        assert api.last.url.params["after"] == str(snowflake_from_datetime(NOW))
