"""Zoho CRM triggers."""

from __future__ import annotations

from datetime import UTC

from ...sdk import (
    JSON,
    ExecuteContext,
    FormBuilder,
    FormSchema,
    Trigger,
    TriggerMetadata,
    filter_since,
    parse_input,
)
from .actions import SAMPLE_RECORD, ModuleInput
from .client import ZohoCRMClient, get_modules

INTEGRATION = "zohocrm"

CRITERIA_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S+00:00"


class _RecordTrigger(Trigger):
    """Records of a module whose ``timestamp_field`` is after the last run."""

    timestamp_field: str

    def properties(self) -> FormSchema:
        return (
            FormBuilder(self.metadata.id, self.metadata.display_name)
            .dynamic("module", "Module", get_modules, required=True)
            .build()
        )

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(ModuleInput, ctx.input, INTEGRATION)
        last_run = ctx.last_run

        async with ZohoCRMClient.from_context(ctx) as client:
            if last_run is None:
                records, _ = await client.records(
                    f"/{data.module}", {"sort_by": self.timestamp_field, "sort_order": "desc"}
                )
            else:
                since = last_run.astimezone(UTC).strftime(CRITERIA_TIME_FORMAT)
                records, _ = await client.records(
                    f"/{data.module}/search", {"criteria": f"({self.timestamp_field}:greater_than:{since})"}
                )

        records = filter_since(records, last_run, self.timestamp_field)
        return {"records": records, "count": len(records), "module": data.module}


class NewRecordCreatedTrigger(_RecordTrigger):
    metadata = TriggerMetadata(
        id="new_record_created",
        display_name="New Record Created",
        description="Triggers when a new record is created in a module.",
        sample_output={"records": [SAMPLE_RECORD], "count": 1, "module": "Leads"},
    )
    timestamp_field = "Created_Time"


class RecordUpdatedTrigger(_RecordTrigger):
    metadata = TriggerMetadata(
        id="record_updated",
        display_name="Record Updated",
        description="Triggers when a record in a module is modified.",
        sample_output={"records": [SAMPLE_RECORD], "count": 1, "module": "Leads"},
    )
    timestamp_field = "Modified_Time"
