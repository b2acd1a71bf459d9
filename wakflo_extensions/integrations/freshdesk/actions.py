"""Freshdesk actions."""

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
from ...sdk.inputs import drop_empty, split_csv
from .client import TICKET_PRIORITIES, TICKET_STATUSES, FreshdeskClient, get_tickets

INTEGRATION = "freshdesk"

OptionalInt = Annotated[int | None, Blankable]


class CreateTicketInput(StepInput):
    subject: RequiredStr
    description: RequiredStr
    email: RequiredStr
    priority: OptionalInt = Field(default=None, ge=1, le=4)
    status: OptionalInt = Field(default=None, ge=2, le=5)
    cc_emails: Annotated[str | list[str] | None, Blankable] = None


class CreateTicketAction(Action):
    metadata = ActionMetadata(
        id="create_ticket",
        display_name="Create Ticket",
        description="Creates a new support ticket.",
        sample_output={
            "id": 42,
            "subject": "Cannot log in",
            "description_text": "Password reset link expired",
            "status": 2,
            "priority": 1,
            "requester_id": 1029,
            "created_at": "2024-05-01T10:00:00Z",
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("create_ticket", "Create Ticket")
            .text("subject", "Subject", required=True)
            .long_text("description", "Description", required=True, description="HTML content of the ticket.")
            .email("email", "Requester Email", required=True)
            .select("priority", "Priority", TICKET_PRIORITIES)
            .select("status", "Status", TICKET_STATUSES)
            .text("cc_emails", "CC Emails", description="Comma separated email addresses.")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreateTicketInput, ctx.input, INTEGRATION)
        payload: dict[str, Any] = drop_empty(
            {
                "subject": data.subject,
                "description": data.description,
                "email": data.email,
                "priority": data.priority,
                "status": data.status or 2,
            }
        )
        cc_emails = split_csv(data.cc_emails)
        if cc_emails:
            payload["cc_emails"] = cc_emails

        async with FreshdeskClient.from_context(ctx) as client:
            return await client.create_ticket(payload)


class UpdateTicketInput(StepInput):
    ticket_id: RequiredStr
    subject: Annotated[str | None, Blankable] = None
    description: Annotated[str | None, Blankable] = None
    priority: OptionalInt = Field(default=None, ge=1, le=4)
    status: OptionalInt = Field(default=None, ge=2, le=5)


class UpdateTicketAction(Action):
    """Fetch the ticket, overlay the provided fields and PUT it back."""

    metadata = ActionMetadata(
        id="update_ticket",
        display_name="Update Ticket",
        description="Updates the subject, description, priority or status of a ticket.",
        sample_output={"Status": "Ticket successfully updated", "ticket": {"id": 42, "status": 4}},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("update_ticket", "Update Ticket")
            .dynamic("ticket_id", "Ticket", get_tickets, required=True)
            .text("subject", "Subject")
            .long_text("description", "Description")
            .select("priority", "Priority", TICKET_PRIORITIES)
            .select("status", "Status", TICKET_STATUSES)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(UpdateTicketInput, ctx.input, INTEGRATION)
        changes = drop_empty(
            {
                "subject": data.subject,
                "description": data.description,
                "priority": data.priority,
                "status": data.status,
            }
        )

        async with FreshdeskClient.from_context(ctx) as client:
            existing = await client.get_ticket(data.ticket_id)
            merged = {
                key: existing.get(key)
                for key in ("subject", "description", "priority", "status")
                if existing.get(key) is not None
            }
            merged.update(changes)
            updated = await client.update_ticket(data.ticket_id, merged)

        return {"Status": "Ticket successfully updated", "ticket": updated}


class GetTicketInput(StepInput):
    ticket_id: RequiredStr


class GetTicketAction(Action):
    metadata = ActionMetadata(
        id="get_ticket",
        display_name="Get Ticket",
        description="Retrieves a ticket by id.",
        sample_output={"id": 42, "subject": "Cannot log in", "status": 2, "priority": 1},
    )

    def properties(self) -> FormSchema:
        return FormBuilder("get_ticket", "Get Ticket").dynamic("ticket_id", "Ticket", get_tickets, required=True).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(GetTicketInput, ctx.input, INTEGRATION)
        async with FreshdeskClient.from_context(ctx) as client:
            return await client.get_ticket(data.ticket_id)


class SearchTicketsInput(StepInput):
    query: RequiredStr
    filter_by: Annotated[str | None, Blankable] = None
    page: Annotated[int | None, Blankable] = Field(default=None, ge=1, le=10)
    per_page: Annotated[int | None, Blankable] = Field(default=None, ge=1, le=30)


class SearchTicketsAction(Action):
    metadata = ActionMetadata(
        id="search_tickets",
        display_name="Search Tickets",
        description="Searches tickets with a Freshdesk filter query, e.g. priority:3 AND status:2.",
        sample_output={"results": [{"id": 42, "subject": "Cannot log in", "priority": 3}], "total": 1},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("search_tickets", "Search Tickets")
            .text("query", "Query", required=True, placeholder="priority:3 AND status:2")
            .text("filter_by", "Filter")
            .number("page", "Page")
            .number("per_page", "Per Page")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(SearchTicketsInput, ctx.input, INTEGRATION)
        async with FreshdeskClient.from_context(ctx) as client:
            return await client.search_tickets(
                data.query,
                filter=data.filter_by,
                page=data.page,
                per_page=data.per_page,
            )
