"""HubSpot actions."""

from __future__ import annotations

from typing import Annotated

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
from ...sdk.inputs import drop_empty
from .client import HubSpotClient

INTEGRATION = "hubspot"

OptionalStr = Annotated[str | None, Blankable]

TICKET_PRIORITIES = [("LOW", "Low"), ("MEDIUM", "Medium"), ("HIGH", "High")]


# =============================================================================
# Contacts
# =============================================================================


class CreateContactInput(StepInput):
    email: RequiredStr
    firstname: OptionalStr = None
    lastname: OptionalStr = None
    phone: OptionalStr = None
    company: OptionalStr = None
    jobtitle: OptionalStr = None
    website: OptionalStr = None
    address: OptionalStr = None
    city: OptionalStr = None
    state: OptionalStr = None
    zip: OptionalStr = Field(default=None, alias="zipcode")
    country: OptionalStr = None


class CreateContactAction(Action):
    metadata = ActionMetadata(
        id="create_contact",
        display_name="Create Contact",
        description="Creates a new contact.",
        sample_output={
            "id": "512",
            "properties": {"email": "ada@example.com", "firstname": "Ada", "lastname": "Lovelace"},
            "createdAt": "2024-05-01T10:00:00.000Z",
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("create_contact", "Create Contact")
            .email("email", "Email", required=True)
            .text("firstname", "First Name")
            .text("lastname", "Last Name")
            .text("phone", "Phone")
            .text("company", "Company")
            .text("jobtitle", "Job Title")
            .url("website", "Website")
            .text("address", "Address")
            .text("city", "City")
            .text("state", "State")
            .text("zipcode", "Zip Code")
            .text("country", "Country")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreateContactInput, ctx.input, INTEGRATION)
        async with HubSpotClient.from_context(ctx) as client:
            return await client.create_object("contacts", drop_empty(data.model_dump()))


class RetrieveContactInput(StepInput):
    email: RequiredStr


class RetrieveContactAction(Action):
    metadata = ActionMetadata(
        id="retrieve_contact",
        display_name="Retrieve Contact",
        description="Finds contacts by email address.",
        sample_output={"total": 1, "results": [{"id": "512", "properties": {"email": "ada@example.com"}}]},
    )

    def properties(self) -> FormSchema:
        return FormBuilder("retrieve_contact", "Retrieve Contact").email("email", "Email", required=True).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(RetrieveContactInput, ctx.input, INTEGRATION)
        body = {"filterGroups": [{"filters": [{"propertyName": "email", "operator": "EQ", "value": data.email}]}]}
        async with HubSpotClient.from_context(ctx) as client:
            return await client.search("contacts", body)


# =============================================================================
# Tickets
# =============================================================================


class CreateTicketInput(StepInput):
    subject: RequiredStr
    content: OptionalStr = None
    priority: OptionalStr = Field(default=None, alias="hs_ticket_priority")
    pipeline: str = Field(default="0", alias="hs_pipeline")
    pipeline_stage: str = Field(default="1", alias="hs_pipeline_stage")


class CreateTicketAction(Action):
    metadata = ActionMetadata(
        id="create_ticket",
        display_name="Create Ticket",
        description="Creates a support ticket in the default pipeline.",
        sample_output={"id": "1024", "properties": {"subject": "Printer jam", "hs_pipeline_stage": "1"}},
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("create_ticket", "Create Ticket")
            .text("subject", "Subject", required=True)
            .long_text("content", "Content")
            .select("hs_ticket_priority", "Priority", TICKET_PRIORITIES)
            .text("hs_pipeline", "Pipeline ID", default="0")
            .text("hs_pipeline_stage", "Pipeline Stage ID", default="1")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreateTicketInput, ctx.input, INTEGRATION)
        properties = drop_empty(
            {
                "subject": data.subject,
                "content": data.content,
                "hs_ticket_priority": data.priority,
                "hs_pipeline": data.pipeline,
                "hs_pipeline_stage": data.pipeline_stage,
            }
        )
        async with HubSpotClient.from_context(ctx) as client:
            return await client.create_object("tickets", properties)


# =============================================================================
# Owners
# =============================================================================


class SearchOwnerInput(StepInput):
    email: RequiredStr


class SearchOwnerAction(Action):
    metadata = ActionMetadata(
        id="search_owner",
        display_name="Search Owner By Email",
        description="Finds a CRM owner by email address.",
        sample_output={"found": True, "owner": {"id": "41629779", "email": "owner@example.com", "firstName": "Grace"}},
    )

    def properties(self) -> FormSchema:
        return FormBuilder("search_owner", "Search Owner By Email").email("email", "Email", required=True).build()

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(SearchOwnerInput, ctx.input, INTEGRATION)
        async with HubSpotClient.from_context(ctx) as client:
            owners = client.expect_object(
                await client.get("/crm/v3/owners", params={"email": data.email}), "owners"
            )

        for owner in owners.get("results") or []:
            if isinstance(owner, dict) and owner.get("email") == data.email:
                return {"found": True, "owner": owner}
        return {"found": False, "message": "No owner found with that email address"}
