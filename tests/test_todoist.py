"""
Tests for the Todoist integration.
"""

import pytest

from wakflo_extensions.integrations.todoist.actions import (
    CreateProjectAction,
    CreateTaskAction,
    ListTasksAction,
    UpdateProjectAction,
    UpdateTaskAction,
)
from wakflo_extensions.integrations.todoist.client import get_sections
from wakflo_extensions.sdk import AuthContext, AuthError, DynamicFieldContext, InputValidationError


class TestTaskActions:
    """Tests for task actions."""

    @pytest.mark.asyncio
    async def test_create_task(self, api, perform_ctx):
        """Labels are split, due dates are sent in UTC and duration is in minutes."""
        api.add("POST", "/rest/v2/tasks", {"id": "2995104339", "content": "Buy Milk"})
        ctx = perform_ctx(
            {
                "content": "Buy Milk",
                "project_id": "2203306141",
                "section_id": "",
                "labels": "errands, home",
                "priority": "4",
                "dueDate": "2024-06-01T09:00:00+02:00",
                "duration": 30,
            }
        )

        result = await CreateTaskAction().perform(ctx)

        assert result["id"] == "2995104339"
        assert api.body() == {
            "content": "Buy Milk",
            "project_id": "2203306141",
            "priority": 4,
            "labels": ["errands", "home"],
            "due_datetime": "2024-06-01T07:00:00Z",
            "duration": 30,
            "duration_unit": "minute",
        }
        assert api.last.headers["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    async def test_create_task_requires_content(self, api, perform_ctx):
        with pytest.raises(InputValidationError, match="content"):
            await CreateTaskAction().perform(perform_ctx({"project_id": "1"}))
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_priority_range(self, api, perform_ctx):
        with pytest.raises(InputValidationError, match="priority"):
            await CreateTaskAction().perform(perform_ctx({"content": "x", "priority": 5}))

    @pytest.mark.asyncio
    async def test_invalid_due_date(self, api, perform_ctx):
        with pytest.raises(InputValidationError, match="invalid due date"):
            await CreateTaskAction().perform(perform_ctx({"content": "x", "dueDate": "tomorrow-ish"}))
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_update_task_sends_only_changes(self, api, perform_ctx):
        api.add("POST", "/rest/v2/tasks/42", {"id": "42"})

        await UpdateTaskAction().perform(perform_ctx({"taskId": "42", "content": "", "description": "More"}))

        assert api.body() == {"description": "More"}

    @pytest.mark.asyncio
    async def test_list_tasks_params(self, api, perform_ctx):
        """Unset filters are not sent."""
        api.add("GET", "/rest/v2/tasks", [{"id": "1"}])

        result = await ListTasksAction().perform(perform_ctx({"project_id": "p1", "filter": "today"}))

        assert result == [{"id": "1"}]
        assert dict(api.last.url.params) == {"project_id": "p1", "filter": "today"}

    @pytest.mark.asyncio
    async def test_missing_token(self, api, perform_ctx):
        with pytest.raises(AuthError, match="access token is required"):
            await ListTasksAction().perform(perform_ctx(token=None))


class TestProjectActions:
    """Tests for project actions."""

    @pytest.mark.asyncio
    async def test_create_project(self, api, perform_ctx):
        api.add("POST", "/rest/v2/projects", {"id": "p1", "name": "Shopping"})

        await CreateProjectAction().perform(perform_ctx({"name": "Shopping", "color": "teal", "is_favorite": False}))

        assert api.body() == {"name": "Shopping", "color": "teal", "is_favorite": False}

    @pytest.mark.asyncio
    async def test_update_project_excludes_id(self, api, perform_ctx):
        api.add("POST", "/rest/v2/projects/p1", {"id": "p1"})

        await UpdateProjectAction().perform(perform_ctx({"project_id": "p1", "name": "Groceries"}))

        assert api.body() == {"name": "Groceries"}


class TestOptions:
    @pytest.mark.asyncio
    async def test_sections_need_project(self, api):
        ctx = DynamicFieldContext(auth=AuthContext(access_token="t"), transport=api.transport)
        assert await get_sections(ctx) == []
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_sections_filtered_by_search(self, api):
        api.add("GET", "/rest/v2/sections", [{"id": "s1", "name": "Groceries"}, {"id": "s2", "name": "Hardware"}])
        ctx = DynamicFieldContext(
            input={"project_id": "p1"},
            auth=AuthContext(access_token="t"),
            transport=api.transport,
            search="groc",
        )

        options = await get_sections(ctx)

        assert [o.id for o in options] == ["s1"]
        assert api.last.url.params["project_id"] == "p1"
