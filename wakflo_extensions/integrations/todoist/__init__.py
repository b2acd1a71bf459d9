"""Todoist integration."""

from ...sdk import AuthSchema, Integration, IntegrationMetadata
from .actions import (
    CreateProjectAction,
    CreateTaskAction,
    ListTasksAction,
    UpdateProjectAction,
    UpdateTaskAction,
)
from .client import TodoistClient


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="todoist",
            name="Todoist",
            description="Manage Todoist tasks and projects.",
            icon="logos:todoist-icon",
            categories=("productivity",),
        ),
        auth=AuthSchema.oauth2(
            authorization_url="https://todoist.com/oauth/authorize",
            token_url="https://todoist.com/oauth/access_token",
            scopes=("data:read_write",),
        ),
        actions=(
            CreateTaskAction(),
            UpdateTaskAction(),
            ListTasksAction(),
            CreateProjectAction(),
            UpdateProjectAction(),
        ),
    )


__all__ = ["TodoistClient", "create_integration"]
