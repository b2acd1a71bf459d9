"""Jira Cloud triggers."""

from __future__ import annotations

from datetime import UTC, timedelta
from typing import Annotated

from pydantic import Field

from ...sdk import (
    JSON,
    Blankable,
    ExecuteContext,
    FormBuilder,
    FormSchema,
    StepInput,
    Trigger,
    TriggerMetadata,
    filter_since,
    parse_input,
)
from .actions import SAMPLE_ISSUE
from .client import JiraClient, get_issue_types, get_projects

INTEGRATION = "jiracloud"

JQL_TIME_FORMAT = "%Y-%m-%d %H:%M"


class IssueTriggerInput(StepInput):
    project_id: Annotated[str | None, Blankable] = Field(default=None, alias="projectId")
    issue_type: Annotated[str | None, Blankable] = Field(default=None, alias="issueType")


class _IssueTrigger(Trigger):
    """
    Shared polling logic for issue triggers.

    JQL dates are read in the Jira user's time zone, not UTC, so the search
    starts a day before the last run. ``timestamp_field`` is re-checked
    locally against the exact last-run time.
    """

    timestamp_field: str
    fields: list[str]
    extra_jql: str = ""

    def properties(self) -> FormSchema:
        return (
            FormBuilder(self.metadata.id, self.metadata.display_name)
            .dynamic("projectId", "Project", get_projects)
            .dynamic("issueType", "Issue Type", get_issue_types, depends_on=["projectId"])
            .build()
        )

    def build_jql(self, data: IssueTriggerInput, ctx: ExecuteContext) -> str:
        clauses = []
        last_run = ctx.last_run
        if last_run is not None:
            since = (last_run - timedelta(days=1)).astimezone(UTC).strftime(JQL_TIME_FORMAT)
            clauses.append(f"{self.timestamp_field} >= '{since}'")
        if self.extra_jql:
            clauses.append(self.extra_jql)
        if data.project_id:
            clauses.append(f"project = {data.project_id}")
        if data.issue_type:
            clauses.append(f"issuetype = {data.issue_type}")
        return f"{' AND '.join(clauses)} ORDER BY {self.timestamp_field} DESC".strip()

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(IssueTriggerInput, ctx.input, INTEGRATION)
        jql = self.build_jql(data, ctx)

        async with JiraClient.from_context(ctx) as client:
            result = await client.search(jql, self.fields)

        issues = filter_since(result.get("issues") or [], ctx.last_run, f"fields.{self.timestamp_field}")
        return {**result, "issues": issues, "total": len(issues)}


class IssueCreatedTrigger(_IssueTrigger):
    metadata = TriggerMetadata(
        id="issue_created",
        display_name="Issue Created",
        description="Triggers when a new issue is created.",
        sample_output={"issues": [SAMPLE_ISSUE], "total": 1},
    )
    timestamp_field = "created"
    fields = ["summary", "description", "status", "creator", "created", "priority", "assignee"]


class IssueUpdatedTrigger(_IssueTrigger):
    metadata = TriggerMetadata(
        id="issue_updated",
        display_name="Issue Updated",
        description="Triggers when an existing issue is updated.",
        sample_output={"issues": [SAMPLE_ISSUE], "total": 1},
    )
    timestamp_field = "updated"
    extra_jql = "updated > created"
    fields = ["summary", "description", "status", "creator", "created", "updated", "priority", "assignee"]
