"""Freshdesk triggers."""

from __future__ import annotations

from datetime import timedelta

from ...sdk import JSON, ExecuteContext, FormBuilder, FormSchema, Trigger, TriggerMetadata, filter_since
from .client import FreshdeskClient


class TicketCreatedTrigger(Trigger):
    """
    Tickets created since the last run.

    Freshdesk's search filters ``created_at`` by day only, so the query
    asks for everything since the previous day and the exact cutoff is
    applied locally.
    """

    metadata = TriggerMetadata(
        id="ticket_created",
        display_name="Ticket Created",
        description="Triggers when a new ticket is created.",
        sample_output=[
            {"id": 42, "subject": "Cannot log in", "status": 2, "created_at": "2024-05-01T10:00:00Z"}
        ],
    )

    def properties(self) -> FormSchema:
        return FormBuilder("ticket_created", "Ticket Created").build()

    async def execute(self, ctx: ExecuteContext) -> JSON:
        last_run = ctx.last_run

        async with FreshdeskClient.from_context(ctx) as client:
            if last_run is None:
                tickets = await client.list_tickets({"order_by": "created_at", "order_type": "asc"})
            else:
                # created_at:>'D' excludes day D itself.
                since = (last_run - timedelta(days=1)).date()
                result = await client.search_tickets(f"created_at:>'{since.isoformat()}'")
                tickets = result.get("results") or []

        return filter_since(tickets, last_run, "created_at")
