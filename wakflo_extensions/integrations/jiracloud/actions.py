"""Jira Cloud actions."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field

from ...sdk import (
    JSON,
    Action,
    ActionMetadata,
    Blankable,
    FormBuilder,
    FormSchema,
    PerformContext,
    RequiredStr,
    StepInput,
    parse_input,
)
from .client import JiraClient, adf_document, get_issue_types, get_issues, get_projects, get_transitions, get_users

INTEGRATION = "jiracloud"

OptionalStr = Annotated[str | None, Blankable]


class IssueFields(StepInput):
    project_id: OptionalStr = Field(default=None, alias="projectId")
    issue_type_id: OptionalStr = Field(default=None, alias="IssueTypeId")
    summary: OptionalStr = None
    description: OptionalStr = None
    assignee: OptionalStr = None
    priority: OptionalStr = None
    parent_key: OptionalStr = Field(default=None, alias="parentKey")

    def to_fields(self) -> dict[str, Any]:
        """Issue ``fields`` object holding only the values that were provided."""
        fields: dict[str, Any] = {}
        if self.summary:
            fields["summary"] = self.summary
        if self.project_id:
            fields["project"] = {"id": self.project_id}
        if self.issue_type_id:
            fields["issuetype"] = {"id": self.issue_type_id}
        if self.description:
            fields["description"] = adf_document(self.description)
        if self.assignee:
            fields["assignee"] = {"id": self.assignee}
        if self.priority:
            fields["priority"] = {"id": self.priority}
        if self.parent_key:
            fields["parent"] = {"key": self.parent_key}
        return fields


def _issue_form(form_id: str, title: str, *, create: bool) -> FormBuilder:
    form = FormBuilder(form_id, title).dynamic("projectId", "Project", get_projects, required=create)
    if not create:
        form.dynamic("issueId", "Issue", get_issues, depends_on=["projectId"], required=True)
    return (
        form.dynamic("IssueTypeId", "Issue Type", get_issue_types, depends_on=["projectId"], required=create)
        .text("summary", "Summary", required=create)
        .long_text("description", "Description")
        .dynamic("assignee", "Assignee", get_users)
        .text("priority", "Priority ID")
        .text("parentKey", "Parent Key", placeholder="PROJ-1")
    )


SAMPLE_ISSUE = {"id": "10000", "key": "ED-24", "self": "https://your-domain.atlassian.net/rest/api/3/issue/10000"}


# =============================================================================
# Issues
# =============================================================================


class CreateIssueInput(IssueFields):
    project_id: RequiredStr = Field(alias="projectId")
    issue_type_id: RequiredStr = Field(alias="IssueTypeId")
    summary: RequiredStr


class CreateIssueAction(Action):
    metadata = ActionMetadata(
        id="create_issue",
        display_name="Create Issue",
        description="Creates a new issue in a project.",
        sample_output=SAMPLE_ISSUE,
    )

    def properties(self) -> FormSchema:
        return _issue_form("create_issue", "Create Issue", create=True).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreateIssueInput, ctx.input, INTEGRATION)
        async with JiraClient.from_context(ctx) as client:
            return await client.call("POST", "/rest/api/3/issue", "Issue created", json={"fields": data.to_fields()})


class UpdateIssueInput(IssueFields):
    issue_id: RequiredStr = Field(alias="issueId")


class UpdateIssueAction(Action):
    metadata = ActionMetadata(
        id="update_issue",
        display_name="Update Issue",
        description="Updates the fields of an existing issue.",
        sample_output={"Result": "Issue Updated"},
    )

    def properties(self) -> FormSchema:
        return _issue_form("update_issue", "Update Issue", create=False).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(UpdateIssueInput, ctx.input, INTEGRATION)
        async with JiraClient.from_context(ctx) as client:
            return await client.call(
                "PUT", f"/rest/api/3/issue/{data.issue_id}", "Issue Updated", json={"fields": data.to_fields()}
            )


class ListIssuesInput(StepInput):
    project_id: RequiredStr = Field(alias="projectId")
    max_results: int = Field(default=50, ge=1, le=100, alias="maxResults")
    only_assigned_to_me: bool = Field(default=False, alias="onlyAssignedToMe")


class ListIssuesAction(Action):
    metadata = ActionMetadata(
        id="list_issues",
        display_name="List Issues",
        description="Lists issues of a project.",
        sample_output={"startAt": 0, "maxResults": 50, "total": 1, "issues": [SAMPLE_ISSUE]},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("list_issues", "List Issues")
            .dynamic("projectId", "Project", get_projects, required=True)
            .number("maxResults", "Max Results", default=50)
            .checkbox("onlyAssignedToMe", "Only Assigned To Me", default=False)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(ListIssuesInput, ctx.input, INTEGRATION)
        jql = f"project={data.project_id}"
        if data.only_assigned_to_me:
            jql += " AND assignee = currentUser()"
        async with JiraClient.from_context(ctx) as client:
            return await client.search(
                jql, ["summary", "status", "priority", "assignee", "updated", "created"], data.max_results
            )


# =============================================================================
# Workflow
# =============================================================================


class AddCommentInput(StepInput):
    issue_id: RequiredStr = Field(alias="issueId")
    comment_text: RequiredStr = Field(alias="commentText")


class AddCommentAction(Action):
    metadata = ActionMetadata(
        id="add_comment",
        display_name="Add Comment",
        description="Adds a comment to an issue.",
        sample_output={"id": "10000", "body": {"type": "doc", "version": 1}, "created": "2024-05-01T10:00:00.000+0000"},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("add_comment", "Add Comment")
            .dynamic("projectId", "Project", get_projects)
            .dynamic("issueId", "Issue", get_issues, depends_on=["projectId"], required=True)
            .long_text("commentText", "Comment", required=True)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(AddCommentInput, ctx.input, INTEGRATION)
        async with JiraClient.from_context(ctx) as client:
            return await client.call(
                "POST",
                f"/rest/api/3/issue/{data.issue_id}/comment",
                "Comment added successfully!",
                json={"body": adf_document(data.comment_text)},
            )


class TransitionIssueInput(StepInput):
    issue_id: RequiredStr = Field(alias="issueId")
    transition_id: RequiredStr = Field(alias="transitionId")
    comment: OptionalStr = None


class TransitionIssueAction(Action):
    metadata = ActionMetadata(
        id="transition_issue",
        display_name="Transition Issue",
        description="Moves an issue to another status.",
        sample_output={"Result": "Issue transitioned successfully"},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("transition_issue", "Transition Issue")
            .dynamic("projectId", "Project", get_projects)
            .dynamic("issueId", "Issue", get_issues, depends_on=["projectId"], required=True)
            .dynamic("transitionId", "Transition", get_transitions, depends_on=["issueId"], required=True)
            .long_text("comment", "Comment")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(TransitionIssueInput, ctx.input, INTEGRATION)
        body: dict[str, Any] = {"transition": {"id": data.transition_id}}
        if data.comment:
            body["update"] = {"comment": [{"add": {"body": adf_document(data.comment)}}]}
        async with JiraClient.from_context(ctx) as client:
            return await client.call(
                "POST",
                f"/rest/api/3/issue/{data.issue_id}/transitions",
                "Issue transitioned successfully",
                json=body,
            )
