"""
Tests for the Mailchimp integration.
"""

from datetime import UTC, datetime

import httpx
import pytest

from wakflo_extensions.integrations.mailchimp.actions import (
    AddMemberToListAction,
    AddNoteToSubscriberAction,
    AddSubscriberToTagAction,
    RemoveSubscriberFromTagAction,
    UpdateSubscriberStatusAction,
)
from wakflo_extensions.integrations.mailchimp.client import subscriber_hash
from wakflo_extensions.integrations.mailchimp.triggers import NewSubscriberTrigger, UnsubscriberTrigger
from wakflo_extensions.sdk import DecodeError, InputValidationError, RemoteValidationError

MEMBER_HASH = subscriber_hash("Ada@Example.com")


@pytest.fixture
def mailchimp_api(api):
    """Mock API with the OAuth metadata endpoint resolving to us6."""
    api.add("GET", "/oauth2/metadata", {"dc": "us6"})
    return api


class TestSubscriberHash:
    def test_lowercases_and_strips(self):
        """Hash is the MD5 of the normalized email."""
        assert subscriber_hash(" Ada@Example.com ") == subscriber_hash("ada@example.com")
        assert len(MEMBER_HASH) == 32


class TestDataCenter:
    """Tests for data center discovery."""

    @pytest.mark.asyncio
    async def test_metadata_lookup_uses_oauth_header(self, mailchimp_api, perform_ctx):
        """The metadata call authenticates with the OAuth scheme and the API call goes to the data center."""
        mailchimp_api.add("POST", "/3.0/lists/l1/members", {"id": "m1"})
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com"})

        await AddMemberToListAction().perform(ctx)

        metadata_request, api_request = mailchimp_api.requests
        assert metadata_request.headers["Authorization"] == "OAuth test-token"
        assert api_request.url.host == "us6.api.mailchimp.com"
        assert api_request.headers["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    async def test_missing_dc(self, api, perform_ctx):
        """Metadata without dc is a decode error."""
        api.add("GET", "/oauth2/metadata", {})
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com"})
        with pytest.raises(DecodeError, match="data center"):
            await AddMemberToListAction().perform(ctx)

    @pytest.mark.asyncio
    async def test_configured_prefix_skips_lookup(self, api, perform_ctx):
        """A server prefix in the auth context avoids the metadata call."""
        api.add("POST", "/3.0/lists/l1/members", {"id": "m1"})
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com"}, **{"server-prefix": "us21"})

        await AddMemberToListAction().perform(ctx)

        assert len(api.requests) == 1
        assert api.last.url.host == "us21.api.mailchimp.com"


# =============================================================================
# Actions
# =============================================================================


class TestMemberActions:
    """Tests for member actions."""

    @pytest.mark.asyncio
    async def test_add_member(self, mailchimp_api, perform_ctx):
        mailchimp_api.add("POST", "/3.0/lists/l1/members", {"id": "m1"})
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com", "first-name": "Ada", "status": "pending"})

        result = await AddMemberToListAction().perform(ctx)

        assert result == {"success": "Contact Added!"}
        assert mailchimp_api.body() == {
            "email_address": "ada@example.com",
            "status": "pending",
            "merge_fields": {"FNAME": "Ada", "LNAME": ""},
        }

    @pytest.mark.asyncio
    async def test_add_member_bad_status(self, api, perform_ctx):
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com", "status": "gone"})
        with pytest.raises(InputValidationError, match="status"):
            await AddMemberToListAction().perform(ctx)
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_existing_member_error(self, mailchimp_api, perform_ctx):
        """A 400 from Mailchimp surfaces with its status code."""
        mailchimp_api.add(
            "POST",
            "/3.0/lists/l1/members",
            httpx.Response(400, json={"title": "Member Exists"}),
        )
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com"})
        with pytest.raises(RemoteValidationError) as exc_info:
            await AddMemberToListAction().perform(ctx)
        assert exc_info.value.status_code == 400
        assert "Member Exists" in exc_info.value.response_body

    @pytest.mark.asyncio
    async def test_add_tags(self, mailchimp_api, perform_ctx):
        """Comma separated tags become active tag entries."""
        mailchimp_api.add("POST", f"/3.0/lists/l1/members/{MEMBER_HASH}/tags", httpx.Response(204))
        ctx = perform_ctx({"list-id": "l1", "email": "Ada@Example.com", "tag-names": "vip, new"})

        result = await AddSubscriberToTagAction().perform(ctx)

        assert result == {"status": "Tag added!"}
        assert mailchimp_api.body() == {
            "tags": [{"name": "vip", "status": "active"}, {"name": "new", "status": "active"}]
        }

    @pytest.mark.asyncio
    async def test_remove_tags(self, mailchimp_api, perform_ctx):
        mailchimp_api.add("POST", f"/3.0/lists/l1/members/{MEMBER_HASH}/tags", httpx.Response(204))
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com", "tag-names": "vip"})

        result = await RemoveSubscriberFromTagAction().perform(ctx)

        assert result == {"status": "Tag removed!"}
        assert mailchimp_api.body()["tags"] == [{"name": "vip", "status": "inactive"}]

    @pytest.mark.asyncio
    async def test_only_commas_is_rejected(self, api, perform_ctx):
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com", "tag-names": " , "})
        with pytest.raises(InputValidationError, match="tag"):
            await AddSubscriberToTagAction().perform(ctx)
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_update_status(self, mailchimp_api, perform_ctx):
        mailchimp_api.add(
            "PATCH",
            f"/3.0/lists/l1/members/{MEMBER_HASH}",
            {"email_address": "ada@example.com", "status": "unsubscribed"},
        )
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com", "status": "unsubscribed"})

        result = await UpdateSubscriberStatusAction().perform(ctx)

        assert result["status"] == "unsubscribed"
        assert mailchimp_api.body() == {"status": "unsubscribed"}

    @pytest.mark.asyncio
    async def test_add_note(self, mailchimp_api, perform_ctx):
        mailchimp_api.add("POST", f"/3.0/lists/l1/members/{MEMBER_HASH}/notes", {"id": 1, "note": "Called"})
        ctx = perform_ctx({"list-id": "l1", "email": "ada@example.com", "note": "Called"})

        result = await AddNoteToSubscriberAction().perform(ctx)

        assert result["note"] == "Called"


# =============================================================================
# Triggers
# =============================================================================


MEMBERS = {
    "members": [
        {"id": "a", "timestamp_opt": "2024-05-01T08:00:00+00:00", "last_changed": "2024-05-01T08:00:00+00:00"},
        {"id": "b", "timestamp_opt": "2024-05-03T08:00:00+00:00", "last_changed": "2024-05-03T08:00:00+00:00"},
    ]
}


class TestTriggers:
    """Tests for subscriber triggers."""

    @pytest.mark.asyncio
    async def test_new_subscriber_first_run(self, mailchimp_api, execute_ctx):
        """The first run fetches every member without a since filter."""
        mailchimp_api.add("GET", "/3.0/lists/l1/members", MEMBERS)

        result = await NewSubscriberTrigger().execute(execute_ctx({"list-id": "l1"}))

        assert [m["id"] for m in result] == ["a", "b"]
        assert "since_timestamp_opt" not in mailchimp_api.last.url.params

    @pytest.mark.asyncio
    async def test_new_subscriber_since_last_run(self, mailchimp_api, execute_ctx):
        """Later runs pass lastRun and filter locally."""
        mailchimp_api.add("GET", "/3.0/lists/l1/members", MEMBERS)
        ctx = execute_ctx({"list-id": "l1"}, metadata={"lastRun": datetime(2024, 5, 2, tzinfo=UTC)})

        result = await NewSubscriberTrigger().execute(ctx)

        assert [m["id"] for m in result] == ["b"]
        assert mailchimp_api.last.url.params["since_timestamp_opt"] == "2024-05-02T00:00:00Z"

    @pytest.mark.asyncio
    async def test_unsubscriber(self, mailchimp_api, execute_ctx):
        mailchimp_api.add("GET", "/3.0/lists/l1/members", MEMBERS)
        ctx = execute_ctx({"list-id": "l1"}, metadata={"lastRun": "2024-05-02T00:00:00Z"})

        result = await UnsubscriberTrigger().execute(ctx)

        assert [m["id"] for m in result] == ["b"]
        params = mailchimp_api.last.url.params
        assert params["status"] == "unsubscribed"
        assert params["unsubscribed_since"] == "2024-05-02T00:00:00Z"
