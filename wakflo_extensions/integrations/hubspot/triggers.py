"""HubSpot triggers."""

from __future__ import annotations

from typing import Any

from ...sdk import (
    JSON,
    ExecuteContext,
    FormBuilder,
    FormSchema,
    StepInput,
    Trigger,
    TriggerMetadata,
    filter_since,
    parse_input,
)
from ...sdk.inputs import split_csv
from .client import HubSpotClient, search_body

INTEGRATION = "hubspot"


class SearchTriggerInput(StepInput):
    properties: str | list[str] | None = None


class _SearchTrigger(Trigger):
    """
    Poll a CRM object search for records changed after the last run.

    The search filter uses the object's timestamp property in epoch
    milliseconds and the same property is re-checked on each result.
    """

    object_type: str
    timestamp_property: str
    default_properties: list[str]

    def properties(self) -> FormSchema:
        return (
            FormBuilder(self.metadata.id, self.metadata.display_name)
            .text("properties", "Additional Properties", description="Comma separated property names.")
            .build()
        )

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(SearchTriggerInput, ctx.input, INTEGRATION)
        last_run = ctx.last_run

        extra = split_csv(data.properties)
        properties = [*self.default_properties, *extra] if extra else None
        body = search_body(self.timestamp_property, since=last_run, properties=properties)

        async with HubSpotClient.from_context(ctx) as client:
            result = await client.search(self.object_type, body)

        records: list[Any] = result.get("results") or []
        kept = filter_since(records, last_run, f"properties.{self.timestamp_property}")
        return {**result, "results": kept, "total": len(kept)}


class ContactUpdatedTrigger(_SearchTrigger):
    metadata = TriggerMetadata(
        id="contact_updated",
        display_name="Contact Updated",
        description="Triggers when a contact is created or updated.",
        sample_output={
            "total": 1,
            "results": [{"id": "512", "properties": {"email": "ada@example.com", "lastmodifieddate": "2024-05-01T10:00:00.000Z"}}],
        },
    )
    object_type = "contacts"
    timestamp_property = "lastmodifieddate"
    default_properties = ["firstname", "lastname", "email", "lastmodifieddate"]


class DealUpdatedTrigger(_SearchTrigger):
    metadata = TriggerMetadata(
        id="deal_updated",
        display_name="Deal Updated",
        description="Triggers when a deal is created or updated.",
        sample_output={
            "total": 1,
            "results": [{"id": "77", "properties": {"dealname": "Renewal", "hs_lastmodifieddate": "2024-05-01T10:00:00.000Z"}}],
        },
    )
    object_type = "deals"
    timestamp_property = "hs_lastmodifieddate"
    default_properties = ["dealname", "amount", "dealstage", "hs_lastmodifieddate"]


class TicketUpdatedTrigger(_SearchTrigger):
    metadata = TriggerMetadata(
        id="ticket_updated",
        display_name="Ticket Updated",
        description="Triggers when a ticket is created or updated.",
        sample_output={
            "total": 1,
            "results": [{"id": "1024", "properties": {"subject": "Printer jam", "hs_lastmodifieddate": "2024-05-01T10:00:00.000Z"}}],
        },
    )
    object_type = "tickets"
    timestamp_property = "hs_lastmodifieddate"
    default_properties = ["subject", "content", "hs_pipeline_stage", "hs_lastmodifieddate"]


class TaskCreatedTrigger(_SearchTrigger):
    metadata = TriggerMetadata(
        id="task_created",
        display_name="Task Created",
        description="Triggers when a new task is created.",
        sample_output={
            "total": 1,
            "results": [{"id": "9", "properties": {"hs_task_subject": "Call Ada", "hs_createdate": "2024-05-01T10:00:00.000Z"}}],
        },
    )
    object_type = "tasks"
    timestamp_property = "hs_createdate"
    default_properties = ["hs_task_subject", "hs_task_body", "hs_task_priority", "hs_createdate"]
