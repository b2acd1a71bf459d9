"""
Tests for the Freshdesk integration.
"""

import base64
from datetime import UTC, datetime

import httpx
import pytest

from wakflo_extensions.integrations.freshdesk.actions import (
    CreateTicketAction,
    GetTicketAction,
    SearchTicketsAction,
    UpdateTicketAction,
)
from wakflo_extensions.integrations.freshdesk.client import build_freshdesk_url
from wakflo_extensions.integrations.freshdesk.triggers import TicketCreatedTrigger
from wakflo_extensions.sdk import AuthError, InputValidationError, RemoteAuthenticationError

AUTH = {"domain": "acme", "api-key": "fd-key"}

TICKETS = [
    {"id": 1, "subject": "Old", "created_at": "2024-05-01T09:00:00Z"},
    {"id": 2, "subject": "New", "created_at": "2024-05-02T10:30:00Z"},
]


class TestBuildUrl:
    """Tests for domain normalization."""

    @pytest.mark.parametrize(
        "domain",
        ["acme", "acme.freshdesk.com", "https://acme.freshdesk.com", "http://acme.freshdesk.com/", " acme "],
    )
    def test_variants(self, domain):
        assert build_freshdesk_url(domain) == "https://acme.freshdesk.com"


# =============================================================================
# Actions
# =============================================================================


class TestTicketActions:
    """Tests for ticket actions."""

    @pytest.mark.asyncio
    async def test_create_ticket(self, api, perform_ctx):
        """Default status is Open and CC emails are split."""
        api.add("POST", "/api/v2/tickets", {"id": 42, "subject": "Help"})
        ctx = perform_ctx(
            {
                "subject": "Help",
                "description": "<p>Broken</p>",
                "email": "ada@example.com",
                "priority": "3",
                "cc_emails": "a@example.com, b@example.com",
            },
            **AUTH,
        )

        result = await CreateTicketAction().perform(ctx)

        assert result == {"id": 42, "subject": "Help"}
        assert api.body() == {
            "subject": "Help",
            "description": "<p>Broken</p>",
            "email": "ada@example.com",
            "priority": 3,
            "status": 2,
            "cc_emails": ["a@example.com", "b@example.com"],
        }
        expected = base64.b64encode(b"fd-key:X").decode()
        assert api.last.headers["Authorization"] == f"Basic {expected}"
        assert api.last.url.host == "acme.freshdesk.com"

    @pytest.mark.asyncio
    async def test_create_ticket_missing_subject(self, api, perform_ctx):
        """Required fields fail before any HTTP call."""
        ctx = perform_ctx({"description": "x", "email": "ada@example.com"}, **AUTH)
        with pytest.raises(InputValidationError, match="subject"):
            await CreateTicketAction().perform(ctx)
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_priority_out_of_range(self, api, perform_ctx):
        ctx = perform_ctx({"subject": "s", "description": "d", "email": "e@x.io", "priority": 9}, **AUTH)
        with pytest.raises(InputValidationError, match="priority"):
            await CreateTicketAction().perform(ctx)

    @pytest.mark.asyncio
    async def test_missing_domain(self, api, perform_ctx):
        ctx = perform_ctx({"ticket_id": "1"}, **{"api-key": "k"})
        with pytest.raises(AuthError, match="Freshdesk domain"):
            await GetTicketAction().perform(ctx)

    @pytest.mark.asyncio
    async def test_update_merges_existing(self, api, perform_ctx):
        """Fields not provided keep their current values."""
        api.add("GET", "/api/v2/tickets/42", {"id": 42, "subject": "Old", "description": "d", "priority": 1, "status": 2})
        api.add("PUT", "/api/v2/tickets/42", {"id": 42, "status": 4})
        ctx = perform_ctx({"ticket_id": "42", "status": 4, "subject": ""}, **AUTH)

        result = await UpdateTicketAction().perform(ctx)

        assert result == {"Status": "Ticket successfully updated", "ticket": {"id": 42, "status": 4}}
        assert api.body() == {"subject": "Old", "description": "d", "priority": 1, "status": 4}

    @pytest.mark.asyncio
    async def test_get_ticket_unauthorized(self, api, perform_ctx):
        """A 401 carries the status code."""
        api.add("GET", "/api/v2/tickets/42", httpx.Response(401, json={"code": "invalid_credentials"}))
        with pytest.raises(RemoteAuthenticationError) as exc_info:
            await GetTicketAction().perform(perform_ctx({"ticket_id": "42"}, **AUTH))
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_search_quotes_query(self, api, perform_ctx):
        """Queries are wrapped in double quotes."""
        api.add("GET", "/api/v2/search/tickets", {"results": [], "total": 0})
        ctx = perform_ctx({"query": "priority:3 AND status:2", "page": 2}, **AUTH)

        result = await SearchTicketsAction().perform(ctx)

        assert result == {"results": [], "total": 0}
        assert api.last.url.params["query"] == '"priority:3 AND status:2"'
        assert api.last.url.params["page"] == "2"
        assert "per_page" not in api.last.url.params


# =============================================================================
# Trigger
# =============================================================================


class TestTicketCreatedTrigger:
    """Tests for TicketCreatedTrigger."""

    @pytest.mark.asyncio
    async def test_first_run_lists_all(self, api, execute_ctx):
        """Without lastRun every ticket is listed."""
        api.add("GET", "/api/v2/tickets", TICKETS)

        result = await TicketCreatedTrigger().execute(execute_ctx(**AUTH))

        assert [t["id"] for t in result] == [1, 2]
        assert api.last.url.params["order_by"] == "created_at"

    @pytest.mark.asyncio
    async def test_since_last_run_searches_previous_day(self, api, execute_ctx):
        """The search starts the day before lastRun and results are filtered exactly."""
        api.add("GET", "/api/v2/search/tickets", {"results": TICKETS, "total": 2})
        ctx = execute_ctx(metadata={"lastRun": datetime(2024, 5, 2, 10, 0, tzinfo=UTC)}, **AUTH)

        result = await TicketCreatedTrigger().execute(ctx)

        assert [t["id"] for t in result] == [2]
        assert api.last.url.params["query"] == "\"created_at:>'2024-05-01'\""
