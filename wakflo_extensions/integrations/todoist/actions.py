"""Todoist actions."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field, field_validator

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
    parse_timestamp,
)
from ...sdk.inputs import drop_empty, split_csv
from ...sdk.polling import rfc3339
from .client import TodoistClient, get_projects, get_sections, get_tasks

INTEGRATION = "todoist"

OptionalStr = Annotated[str | None, Blankable]

PRIORITIES = [("1", "Normal"), ("2", "Medium"), ("3", "High"), ("4", "Urgent")]
PROJECT_COLORS = [
    ("berry_red", "Berry Red"),
    ("red", "Red"),
    ("orange", "Orange"),
    ("yellow", "Yellow"),
    ("green", "Green"),
    ("teal", "Teal"),
    ("blue", "Blue"),
    ("grape", "Grape"),
    ("violet", "Violet"),
    ("charcoal", "Charcoal"),
]
VIEW_STYLES = [("list", "List"), ("board", "Board")]

SAMPLE_TASK = {
    "id": "2995104339",
    "project_id": "2203306141",
    "content": "Buy Milk",
    "priority": 1,
    "is_completed": False,
    "created_at": "2024-05-01T10:00:00.000000Z",
    "url": "https://todoist.com/showTask?id=2995104339",
}
SAMPLE_PROJECT = {
    "id": "2203306141",
    "name": "Shopping List",
    "color": "charcoal",
    "is_favorite": False,
    "view_style": "list",
    "url": "https://todoist.com/showProject?id=2203306141",
}


class _TaskFields(StepInput):
    description: OptionalStr = None
    labels: list[str] = Field(default_factory=list)
    priority: Annotated[int | None, Blankable] = Field(default=None, ge=1, le=4)
    due_date: OptionalStr = Field(default=None, alias="dueDate")
    duration: Annotated[int | None, Blankable] = Field(default=None, ge=1)

    @field_validator("labels", mode="before")
    @classmethod
    def split_labels(cls, value: Any) -> list[str]:
        return split_csv(value)

    def task_payload(self) -> dict[str, Any]:
        payload = drop_empty({"description": self.description, "priority": self.priority})
        if self.labels:
            payload["labels"] = self.labels
        if self.due_date:
            due = parse_timestamp(self.due_date)
            if due is None:
                raise InputValidationError(f"invalid due date: {self.due_date}", INTEGRATION)
            payload["due_datetime"] = rfc3339(due)
        if self.duration:
            payload["duration"] = self.duration
            payload["duration_unit"] = "minute"
        return payload


def _task_form(builder: FormBuilder, *, content_required: bool) -> FormBuilder:
    return (
        builder.long_text("content", "Content", required=content_required, description="Markdown is supported.")
        .long_text("description", "Description")
        .array("labels", "Labels")
        .select("priority", "Priority", PRIORITIES)
        .date_time("dueDate", "Due Date")
        .number("duration", "Duration (minutes)")
    )


# =============================================================================
# Tasks
# =============================================================================


class CreateTaskInput(_TaskFields):
    content: RequiredStr
    project_id: OptionalStr = None
    section_id: OptionalStr = None
    parent_id: OptionalStr = None
    order: Annotated[int | None, Blankable] = None


class CreateTaskAction(Action):
    metadata = ActionMetadata(
        id="create_task",
        display_name="Create Task",
        description="Creates a new task.",
        sample_output=SAMPLE_TASK,
    )

    def properties(self) -> FormSchema:
        builder = (
            FormBuilder("create_task", "Create Task")
            .dynamic("project_id", "Project", get_projects)
            .dynamic("section_id", "Section", get_sections, depends_on=["project_id"])
            .dynamic("parent_id", "Parent Task", get_tasks, depends_on=["project_id"])
            .number("order", "Order")
        )
        return _task_form(builder, content_required=True).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreateTaskInput, ctx.input, INTEGRATION)
        payload = {
            "content": data.content,
            **drop_empty(
                {
                    "project_id": data.project_id,
                    "section_id": data.section_id,
                    "parent_id": data.parent_id,
                    "order": data.order,
                }
            ),
            **data.task_payload(),
        }
        async with TodoistClient.from_context(ctx) as client:
            return await client.post("/tasks", json=payload)


class UpdateTaskInput(_TaskFields):
    task_id: RequiredStr = Field(alias="taskId")
    content: OptionalStr = None


class UpdateTaskAction(Action):
    metadata = ActionMetadata(
        id="update_task",
        display_name="Update Task",
        description="Updates an existing task.",
        sample_output=SAMPLE_TASK,
    )

    def properties(self) -> FormSchema:
        builder = (
            FormBuilder("update_task", "Update Task")
            .dynamic("project_id", "Project", get_projects)
            .dynamic("taskId", "Task", get_tasks, depends_on=["project_id"], required=True)
        )
        return _task_form(builder, content_required=False).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(UpdateTaskInput, ctx.input, INTEGRATION)
        payload = {**drop_empty({"content": data.content}), **data.task_payload()}
        async with TodoistClient.from_context(ctx) as client:
            return await client.post(f"/tasks/{data.task_id}", json=payload)


class ListTasksInput(StepInput):
    project_id: OptionalStr = None
    section_id: OptionalStr = None
    label: OptionalStr = None
    filter: OptionalStr = None


class ListTasksAction(Action):
    metadata = ActionMetadata(
        id="list_tasks",
        display_name="List Tasks",
        description="Lists active tasks, optionally filtered by project, section or label.",
        sample_output=[SAMPLE_TASK],
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("list_tasks", "List Tasks")
            .dynamic("project_id", "Project", get_projects)
            .dynamic("section_id", "Section", get_sections, depends_on=["project_id"])
            .text("label", "Label")
            .text("filter", "Filter", placeholder="today | overdue")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(ListTasksInput, ctx.input, INTEGRATION)
        async with TodoistClient.from_context(ctx) as client:
            return await client.list_tasks(data.model_dump())


# =============================================================================
# Projects
# =============================================================================


class CreateProjectInput(StepInput):
    name: RequiredStr
    parent_id: OptionalStr = None
    color: OptionalStr = None
    is_favorite: Annotated[bool | None, Blankable] = None
    view_style: OptionalStr = None


class CreateProjectAction(Action):
    metadata = ActionMetadata(
        id="create_project",
        display_name="Create Project",
        description="Creates a new project.",
        sample_output=SAMPLE_PROJECT,
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("create_project", "Create Project")
            .text("name", "Name", required=True)
            .dynamic("parent_id", "Parent Project", get_projects)
            .select("color", "Color", PROJECT_COLORS)
            .checkbox("is_favorite", "Favorite")
            .select("view_style", "View Style", VIEW_STYLES)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreateProjectInput, ctx.input, INTEGRATION)
        async with TodoistClient.from_context(ctx) as client:
            return await client.post("/projects", json=drop_empty(data.model_dump()))


class UpdateProjectInput(StepInput):
    project_id: RequiredStr
    name: OptionalStr = None
    color: OptionalStr = None
    is_favorite: Annotated[bool | None, Blankable] = None
    view_style: OptionalStr = None


class UpdateProjectAction(Action):
    metadata = ActionMetadata(
        id="update_project",
        display_name="Update Project",
        description="Updates an existing project.",
        sample_output=SAMPLE_PROJECT,
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("update_project", "Update Project")
            .dynamic("project_id", "Project", get_projects, required=True)
            .text("name", "Name")
            .select("color", "Color", PROJECT_COLORS)
            .checkbox("is_favorite", "Favorite")
            .select("view_style", "View Style", VIEW_STYLES)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(UpdateProjectInput, ctx.input, INTEGRATION)
        payload = drop_empty(data.model_dump(exclude={"project_id"}))
        async with TodoistClient.from_context(ctx) as client:
            return await client.post(f"/projects/{data.project_id}", json=payload)
