"""Jira Cloud integration."""

from ...sdk import AuthSchema, FormBuilder, Integration, IntegrationMetadata
from .actions import (
    AddCommentAction,
    CreateIssueAction,
    ListIssuesAction,
    TransitionIssueAction,
    UpdateIssueAction,
)
from .client import JiraClient, adf_document
from .triggers import IssueCreatedTrigger, IssueUpdatedTrigger


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="jiracloud",
            name="Jira Cloud",
            description="Create, update and track issues in Jira Cloud.",
            icon="logos:jira",
            categories=("project-management",),
        ),
        auth=AuthSchema.custom(
            FormBuilder("jiracloud-auth", "Jira Cloud")
            .url(
                "instance-url",
                "Instance URL",
                required=True,
                description="The link of your Jira instance (e.g https://example.atlassian.net)",
            )
            .email("email", "Email", required=True, description="The email you use to login to Jira")
            .secret("api-token", "API Token", required=True)
            .build(),
        ),
        actions=(
            CreateIssueAction(),
            UpdateIssueAction(),
            ListIssuesAction(),
            AddCommentAction(),
            TransitionIssueAction(),
        ),
        triggers=(IssueCreatedTrigger(), IssueUpdatedTrigger()),
    )


__all__ = ["JiraClient", "adf_document", "create_integration"]
