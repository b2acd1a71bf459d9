"""
Tests for the Jira Cloud and HubSpot integrations.

Tests cover:
- Jira issue field mapping, 204 handling and JQL trigger queries
- HubSpot object creation, owner search and search-based triggers
"""

from datetime import UTC, datetime

import httpx
import pytest

from wakflo_extensions.integrations.hubspot.actions import (
    CreateContactAction,
    CreateTicketAction as CreateHubSpotTicketAction,
    RetrieveContactAction,
    SearchOwnerAction,
)
from wakflo_extensions.integrations.hubspot.client import search_body
from wakflo_extensions.integrations.hubspot.triggers import ContactUpdatedTrigger, TaskCreatedTrigger
from wakflo_extensions.integrations.jiracloud.actions import (
    AddCommentAction,
    CreateIssueAction,
    ListIssuesAction,
    TransitionIssueAction,
    UpdateIssueAction,
)
from wakflo_extensions.integrations.jiracloud.client import adf_document
from wakflo_extensions.integrations.jiracloud.triggers import IssueCreatedTrigger, IssueUpdatedTrigger
from wakflo_extensions.sdk import AuthError, InputValidationError, RemoteAPIError

JIRA_AUTH = {"instance-url": "https://acme.atlassian.net/", "email": "ada@example.com", "api-token": "tok"}
LAST_RUN = datetime(2024, 5, 2, 10, 30, tzinfo=UTC)


# =============================================================================
# Jira: actions
# =============================================================================


class TestJiraActions:
    """Tests for Jira actions."""

    @pytest.mark.asyncio
    async def test_create_issue_fields(self, api, perform_ctx):
        """Only provided fields are sent and the description becomes ADF."""
        api.add("POST", "/rest/api/3/issue", {"id": "10000", "key": "ED-24"})
        ctx = perform_ctx(
            {"projectId": "10001", "IssueTypeId": "3", "summary": "Broken login", "description": "Steps..."},
            **JIRA_AUTH,
        )

        result = await CreateIssueAction().perform(ctx)

        assert result == {"id": "10000", "key": "ED-24"}
        assert api.body() == {
            "fields": {
                "summary": "Broken login",
                "project": {"id": "10001"},
                "issuetype": {"id": "3"},
                "description": adf_document("Steps..."),
            }
        }
        assert api.last.url.host == "acme.atlassian.net"
        assert api.last.headers["Authorization"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_create_issue_requires_summary(self, api, perform_ctx):
        ctx = perform_ctx({"projectId": "10001", "IssueTypeId": "3"}, **JIRA_AUTH)
        with pytest.raises(InputValidationError, match="summary"):
            await CreateIssueAction().perform(ctx)
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_missing_api_token(self, api, perform_ctx):
        ctx = perform_ctx({"issueId": "1", "commentText": "x"}, **{"instance-url": "https://a", "email": "e"})
        with pytest.raises(AuthError, match="API token"):
            await AddCommentAction().perform(ctx)

    @pytest.mark.asyncio
    async def test_update_issue_no_content(self, api, perform_ctx):
        """A 204 reply yields a Result message."""
        api.add("PUT", "/rest/api/3/issue/ED-24", httpx.Response(204))
        ctx = perform_ctx({"issueId": "ED-24", "summary": "Renamed"}, **JIRA_AUTH)

        result = await UpdateIssueAction().perform(ctx)

        assert result == {"Result": "Issue Updated"}
        assert api.body() == {"fields": {"summary": "Renamed"}}

    @pytest.mark.asyncio
    async def test_add_comment_returns_comment(self, api, perform_ctx):
        api.add("POST", "/rest/api/3/issue/ED-24/comment", {"id": "c1"})
        ctx = perform_ctx({"issueId": "ED-24", "commentText": "Looks good"}, **JIRA_AUTH)

        result = await AddCommentAction().perform(ctx)

        assert result == {"id": "c1"}
        assert api.body() == {"body": adf_document("Looks good")}

    @pytest.mark.asyncio
    async def test_add_comment_no_content(self, api, perform_ctx):
        api.add("POST", "/rest/api/3/issue/ED-24/comment", httpx.Response(204))
        ctx = perform_ctx({"issueId": "ED-24", "commentText": "Looks good"}, **JIRA_AUTH)

        assert await AddCommentAction().perform(ctx) == {"Result": "Comment added successfully!"}

    @pytest.mark.asyncio
    async def test_transition_with_comment(self, api, perform_ctx):
        api.add("POST", "/rest/api/3/issue/ED-24/transitions", httpx.Response(204))
        ctx = perform_ctx({"issueId": "ED-24", "transitionId": "31", "comment": "Done"}, **JIRA_AUTH)

        result = await TransitionIssueAction().perform(ctx)

        assert result == {"Result": "Issue transitioned successfully"}
        assert api.body() == {
            "transition": {"id": "31"},
            "update": {"comment": [{"add": {"body": adf_document("Done")}}]},
        }

    @pytest.mark.asyncio
    async def test_list_issues_jql(self, api, perform_ctx):
        api.add("POST", "/rest/api/3/search", {"issues": [], "total": 0})
        ctx = perform_ctx({"projectId": "10001", "onlyAssignedToMe": True, "maxResults": 10}, **JIRA_AUTH)

        await ListIssuesAction().perform(ctx)

        body = api.body()
        assert body["jql"] == "project=10001 AND assignee = currentUser()"
        assert body["maxResults"] == 10

    @pytest.mark.asyncio
    async def test_server_error_has_status(self, api, perform_ctx):
        api.add("POST", "/rest/api/3/search", httpx.Response(500, text="oops"))
        with pytest.raises(RemoteAPIError) as exc_info:
            await ListIssuesAction().perform(perform_ctx({"projectId": "1"}, **JIRA_AUTH))
        assert "500" in str(exc_info.value)


# =============================================================================
# Jira: triggers
# =============================================================================


ISSUES = {
    "startAt": 0,
    "issues": [
        {"id": "2", "fields": {"created": "2024-05-02T11:00:00.000+0000", "updated": "2024-05-02T12:00:00.000+0000"}},
        {"id": "1", "fields": {"created": "2024-05-02T10:30:00.000+0000", "updated": "2024-05-02T10:30:00.000+0000"}},
    ],
    "total": 2,
}


class TestJiraTriggers:
    """Tests for issue triggers."""

    @pytest.mark.asyncio
    async def test_issue_created_first_run(self, api, execute_ctx):
        """Without lastRun the JQL only orders results."""
        api.add("POST", "/rest/api/3/search", ISSUES)

        result = await IssueCreatedTrigger().execute(execute_ctx(**JIRA_AUTH))

        assert api.body()["jql"] == "ORDER BY created DESC"
        assert result["total"] == 2
        assert result["startAt"] == 0

    @pytest.mark.asyncio
    async def test_issue_created_since(self, api, execute_ctx):
        """The JQL starts a day early and each issue is re-checked against lastRun."""
        api.add("POST", "/rest/api/3/search", ISSUES)
        ctx = execute_ctx({"projectId": "10001", "issueType": "3"}, metadata={"lastRun": LAST_RUN}, **JIRA_AUTH)

        result = await IssueCreatedTrigger().execute(ctx)

        assert api.body()["jql"] == (
            "created >= '2024-05-01 10:30' AND project = 10001 AND issuetype = 3 ORDER BY created DESC"
        )
        assert [i["id"] for i in result["issues"]] == ["2"]
        assert result["total"] == 1

    @pytest.mark.asyncio
    async def test_issue_updated_excludes_new(self, api, execute_ctx):
        api.add("POST", "/rest/api/3/search", ISSUES)
        ctx = execute_ctx(metadata={"lastRun": LAST_RUN}, **JIRA_AUTH)

        result = await IssueUpdatedTrigger().execute(ctx)

        assert api.body()["jql"] == "updated >= '2024-05-01 10:30' AND updated > created ORDER BY updated DESC"
        assert [i["id"] for i in result["issues"]] == ["2"]

    @pytest.mark.asyncio
    async def test_issue_created_earlier_that_day_is_dropped(self, api, execute_ctx):
        """Issues inside the widened JQL window but before lastRun are filtered out locally."""
        issues = {
            "startAt": 0,
            "issues": [
                {"id": "3", "fields": {"created": "2024-05-01T23:00:00.000+0000"}},
                {"id": "4", "fields": {"created": "2024-05-02T10:31:00.000+0000"}},
            ],
            "total": 2,
        }
        api.add("POST", "/rest/api/3/search", issues)

        result = await IssueCreatedTrigger().execute(execute_ctx(metadata={"lastRun": LAST_RUN}, **JIRA_AUTH))

        assert api.body()["jql"] == "created >= '2024-05-01 10:30' ORDER BY created DESC"
        assert [i["id"] for i in result["issues"]] == ["4"]
        assert result["total"] == 1


# =============================================================================
# HubSpot
# =============================================================================


class TestSearchBody:
    def test_without_since(self):
        body = search_body("hs_createdate")
        assert body == {"limit": 100, "sorts": [{"propertyName": "hs_createdate", "direction": "DESCENDING"}]}

    def test_with_since(self):
        """The GT filter is in epoch milliseconds."""
        body = search_body("lastmodifieddate", since=datetime(2024, 1, 1, tzinfo=UTC), properties=["email"])
        flt = body["filterGroups"][0]["filters"][0]
        assert flt == {"propertyName": "lastmodifieddate", "operator": "GT", "value": 1704067200000}
        assert body["properties"] == ["email"]


class TestHubSpotActions:
    """Tests for HubSpot actions."""

    @pytest.mark.asyncio
    async def test_create_contact(self, api, perform_ctx):
        """Blank properties are dropped and zipcode maps to zip."""
        api.add("POST", "/crm/v3/objects/contacts", {"id": "512"})
        ctx = perform_ctx({"email": "ada@example.com", "firstname": "Ada", "phone": "", "zipcode": "10115"})

        result = await CreateContactAction().perform(ctx)

        assert result == {"id": "512"}
        assert api.body() == {"properties": {"email": "ada@example.com", "firstname": "Ada", "zip": "10115"}}
        assert api.last.headers["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    async def test_create_contact_requires_email(self, api, perform_ctx):
        with pytest.raises(InputValidationError, match="email"):
            await CreateContactAction().perform(perform_ctx({"firstname": "Ada"}))
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_retrieve_contact(self, api, perform_ctx):
        api.add("POST", "/crm/v3/objects/contacts/search", {"total": 0, "results": []})

        await RetrieveContactAction().perform(perform_ctx({"email": "ada@example.com"}))

        flt = api.body()["filterGroups"][0]["filters"][0]
        assert flt == {"propertyName": "email", "operator": "EQ", "value": "ada@example.com"}

    @pytest.mark.asyncio
    async def test_create_ticket_defaults(self, api, perform_ctx):
        api.add("POST", "/crm/v3/objects/tickets", {"id": "1024"})

        await CreateHubSpotTicketAction().perform(perform_ctx({"subject": "Printer jam"}))

        assert api.body() == {"properties": {"subject": "Printer jam", "hs_pipeline": "0", "hs_pipeline_stage": "1"}}

    @pytest.mark.asyncio
    async def test_search_owner(self, api, perform_ctx):
        api.add("GET", "/crm/v3/owners", {"results": [{"id": "1", "email": "owner@example.com"}]})

        found = await SearchOwnerAction().perform(perform_ctx({"email": "owner@example.com"}))
        missing = await SearchOwnerAction().perform(perform_ctx({"email": "nobody@example.com"}))

        assert found == {"found": True, "owner": {"id": "1", "email": "owner@example.com"}}
        assert missing == {"found": False, "message": "No owner found with that email address"}


class TestHubSpotTriggers:
    """Tests for search-based triggers."""

    RESULTS = {
        "total": 2,
        "results": [
            {"id": "b", "properties": {"lastmodifieddate": "2024-05-03T10:00:00.000Z"}},
            {"id": "a", "properties": {"lastmodifieddate": "2024-05-01T10:00:00.000Z"}},
        ],
    }

    @pytest.mark.asyncio
    async def test_first_run(self, api, execute_ctx):
        """The first run sends no filter groups."""
        api.add("POST", "/crm/v3/objects/contacts/search", self.RESULTS)

        result = await ContactUpdatedTrigger().execute(execute_ctx())

        assert "filterGroups" not in api.body()
        assert result["total"] == 2

    @pytest.mark.asyncio
    async def test_since_last_run(self, api, execute_ctx):
        api.add("POST", "/crm/v3/objects/contacts/search", self.RESULTS)
        ctx = execute_ctx({"properties": "phone"}, metadata={"lastRun": "2024-05-02T00:00:00Z"})

        result = await ContactUpdatedTrigger().execute(ctx)

        assert [r["id"] for r in result["results"]] == ["b"]
        assert result["total"] == 1
        body = api.body()
        assert body["properties"] == ["firstname", "lastname", "email", "lastmodifieddate", "phone"]
        assert body["filterGroups"][0]["filters"][0]["value"] == 1714608000000

    @pytest.mark.asyncio
    async def test_task_created_uses_createdate(self, api, execute_ctx):
        api.add("POST", "/crm/v3/objects/tasks/search", {"results": []})

        result = await TaskCreatedTrigger().execute(execute_ctx())

        assert api.body()["sorts"][0]["propertyName"] == "hs_createdate"
        assert result == {"results": [], "total": 0}
