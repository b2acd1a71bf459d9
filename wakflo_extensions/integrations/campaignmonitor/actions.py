"""Campaign Monitor actions."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any

from pydantic import Field, field_validator

from ...sdk import (
    JSON,
    Action,
    ActionMetadata,
    Blankable,
    FieldType,
    FormBuilder,
    FormSchema,
    InputValidationError,
    PerformContext,
    RequiredStr,
    StepInput,
    parse_input,
)
from ...sdk.inputs import split_csv
from .client import CampaignMonitorClient, get_draft_campaigns, get_lists

INTEGRATION = "campaignmonitor"

SEND_DATE_FORMAT = "%Y-%m-%d %H:%M"

CONSENT_OPTIONS = [("Yes", "Yes"), ("No", "No"), ("Unchanged", "Unchanged")]


def normalize_send_date(value: str) -> str:
    """
    Normalize a send date to ``YYYY-MM-DD HH:MM``.

    ``Immediately`` is passed through. ISO timestamps such as
    ``2024-05-01T10:30:00+02:00`` are truncated to minutes.

    Raises:
        ValueError: If the value is not a recognizable date-time
    """
    value = value.strip()
    if value.lower() == "immediately":
        return "Immediately"
    if "T" in value:
        date_part, time_part = value.split("T", 1)
        time_part = re.split(r"[+Z]", time_part)[0]
        value = f"{date_part} {':'.join(time_part.split(':')[:2])}"
    datetime.strptime(value, SEND_DATE_FORMAT)
    return value


class CustomField(StepInput):
    key: RequiredStr
    value: str = ""


# =============================================================================
# Subscribers
# =============================================================================


class AddSubscriberInput(StepInput):
    list_id: RequiredStr = Field(alias="listId")
    email: RequiredStr
    name: Annotated[str | None, Blankable] = None
    custom_fields: list[CustomField] = Field(default_factory=list, alias="customFields")
    consent_to_track: str = Field(default="Unchanged", alias="consentToTrack")
    consent_to_send_sms: Annotated[str | None, Blankable] = Field(default=None, alias="consentToSendSMS")
    resubscribe: bool = True
    restart_autoresponders: bool = Field(default=False, alias="restartAutoresponders")


class AddSubscriberAction(Action):
    metadata = ActionMetadata(
        id="add_subscriber",
        display_name="Add Subscriber",
        description="Adds a subscriber to a list.",
        sample_output={
            "success": True,
            "message": "Subscriber added successfully",
            "result": {"rawResponse": "\"ada@example.com\""},
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("add_subscriber", "Add Subscriber")
            .dynamic("listId", "List", get_lists, required=True)
            .email("email", "Email", required=True)
            .text("name", "Name")
            .array("customFields", "Custom Fields", description="Key/value pairs.")
            .select("consentToTrack", "Consent To Track", CONSENT_OPTIONS, required=True, default="Unchanged")
            .select("consentToSendSMS", "Consent To Send SMS", CONSENT_OPTIONS)
            .checkbox("resubscribe", "Resubscribe", default=True)
            .checkbox("restartAutoresponders", "Restart Autoresponders", default=False)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(AddSubscriberInput, ctx.input, INTEGRATION)
        body: dict[str, Any] = {
            "EmailAddress": data.email,
            "Resubscribe": data.resubscribe,
            "RestartAutoresponders": data.restart_autoresponders,
            "ConsentToTrack": data.consent_to_track,
        }
        if data.name:
            body["Name"] = data.name
        if data.consent_to_send_sms:
            body["ConsentToSendSMS"] = data.consent_to_send_sms
        if data.custom_fields:
            body["CustomFields"] = [{"Key": f.key, "Value": f.value} for f in data.custom_fields]

        async with CampaignMonitorClient.from_context(ctx) as client:
            result = await client.post(f"/subscribers/{data.list_id}.json", json=body)

        return {"success": True, "message": "Subscriber added successfully", "result": result}


class SubscriberInput(StepInput):
    list_id: RequiredStr = Field(alias="listId")
    email: RequiredStr


class GetSubscriberDetailsAction(Action):
    metadata = ActionMetadata(
        id="get_subscriber_details",
        display_name="Get Subscriber Details",
        description="Returns the details of a subscriber in a list.",
        sample_output={
            "EmailAddress": "ada@example.com",
            "Name": "Ada",
            "Date": "2024-05-01 10:00:00",
            "State": "Active",
            "CustomFields": [],
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("get_subscriber_details", "Get Subscriber Details")
            .dynamic("listId", "List", get_lists, required=True)
            .email("email", "Email", required=True)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(SubscriberInput, ctx.input, INTEGRATION)
        async with CampaignMonitorClient.from_context(ctx) as client:
            return await client.get(f"/subscribers/{data.list_id}.json", params={"email": data.email})


class ListSubscribersInput(StepInput):
    list_id: RequiredStr = Field(alias="listId")
    page: Annotated[int | None, Blankable] = Field(default=None, ge=1)


class ListSubscribersAction(Action):
    metadata = ActionMetadata(
        id="list_subscribers",
        display_name="List Subscribers",
        description="Lists active subscribers of a list.",
        sample_output={
            "Results": [{"EmailAddress": "ada@example.com", "Name": "Ada", "Date": "2024-05-01 10:00:00", "State": "Active"}],
            "PageNumber": 1,
            "PageSize": 1000,
            "TotalNumberOfRecords": 1,
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("list_subscribers", "List Subscribers")
            .dynamic("listId", "List", get_lists, required=True)
            .number("page", "Page", default=1)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(ListSubscribersInput, ctx.input, INTEGRATION)
        async with CampaignMonitorClient.from_context(ctx) as client:
            return await client.get(f"/lists/{data.list_id}/active.json", params={"page": data.page or 1})


class GetSubscriberListsAction(Action):
    metadata = ActionMetadata(
        id="get_subscriber_lists",
        display_name="Get Subscriber Lists",
        description="Lists all subscriber lists of the connected client.",
        sample_output=[{"ListID": "a58ee1d3039b8bec838e6d1482a8a965", "Name": "Newsletter"}],
    )

    def properties(self) -> FormSchema:
        return FormBuilder("get_subscriber_lists", "Get Subscriber Lists").build()

    async def perform(self, ctx: PerformContext) -> JSON:
        async with CampaignMonitorClient.from_context(ctx) as client:
            return await client.client_resource("lists")


# =============================================================================
# Campaigns
# =============================================================================


_CAMPAIGN_SOURCES = (("campaigns", "Sent"), ("drafts", "Draft"), ("scheduled", "Scheduled"))


class ListAllCampaignsAction(Action):
    """Sent, draft and scheduled campaigns merged into one list tagged by status."""

    metadata = ActionMetadata(
        id="list_all_campaigns",
        display_name="List All Campaigns",
        description="Lists sent, draft and scheduled campaigns of the connected client.",
        sample_output={
            "campaigns": [
                {"CampaignID": "fc0ce7105baeaf97f47c99be31d02a91", "Name": "May newsletter", "Status": "Sent"},
                {"CampaignID": "7c7424792065d92627139208c8c01db1", "Name": "June newsletter", "Status": "Draft"},
            ],
            "count": 2,
        },
    )

    def properties(self) -> FormSchema:
        return FormBuilder("list_all_campaigns", "List All Campaigns").build()

    async def perform(self, ctx: PerformContext) -> JSON:
        campaigns: list[dict[str, Any]] = []
        async with CampaignMonitorClient.from_context(ctx) as client:
            client_id = client.require_client_id()
            for resource, status in _CAMPAIGN_SOURCES:
                for campaign in await client.client_resource(resource, client_id):
                    if isinstance(campaign, dict):
                        campaigns.append({**campaign, "Status": status})
        return {"campaigns": campaigns, "count": len(campaigns)}


class CreateCampaignInput(StepInput):
    name: RequiredStr
    subject: RequiredStr
    from_name: RequiredStr = Field(alias="fromName")
    from_email: RequiredStr = Field(alias="fromEmail")
    reply_to: RequiredStr = Field(alias="replyTo")
    html_url: RequiredStr = Field(alias="htmlUrl")
    text_url: Annotated[str | None, Blankable] = Field(default=None, alias="textUrl")
    list_id: Annotated[str | None, Blankable] = Field(default=None, alias="listId")
    segment_ids: list[str] = Field(default_factory=list, alias="segmentIds")

    @field_validator("segment_ids", mode="before")
    @classmethod
    def split_segments(cls, value: Any) -> list[str]:
        return split_csv(value)


class CreateCampaignAction(Action):
    metadata = ActionMetadata(
        id="create_campaign",
        display_name="Create Campaign",
        description="Creates a draft campaign from hosted HTML content.",
        sample_output="fc0ce7105baeaf97f47c99be31d02a91",
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("create_campaign", "Create Campaign")
            .text("name", "Name", required=True)
            .text("subject", "Subject", required=True)
            .text("fromName", "From Name", required=True)
            .email("fromEmail", "From Email", required=True)
            .email("replyTo", "Reply To", required=True)
            .url("htmlUrl", "HTML URL", required=True)
            .url("textUrl", "Text URL")
            .dynamic("listId", "List", get_lists)
            .array("segmentIds", "Segment IDs", items=FieldType.TEXT)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CreateCampaignInput, ctx.input, INTEGRATION)
        if not data.list_id and not data.segment_ids:
            raise InputValidationError("either a list ID or segment IDs must be provided", INTEGRATION)

        payload: dict[str, Any] = {
            "Name": data.name,
            "Subject": data.subject,
            "FromName": data.from_name,
            "FromEmail": data.from_email,
            "ReplyTo": data.reply_to,
            "HtmlUrl": data.html_url,
        }
        if data.text_url:
            payload["TextUrl"] = data.text_url
        if data.list_id:
            payload["ListIDs"] = [data.list_id]
        if data.segment_ids:
            payload["SegmentIDs"] = data.segment_ids

        async with CampaignMonitorClient.from_context(ctx) as client:
            return await client.post(f"/campaigns/{client.require_client_id()}.json", json=payload)


class SendCampaignInput(StepInput):
    campaign_id: RequiredStr = Field(alias="campaignId")
    confirmation_email: list[str] = Field(default_factory=list, alias="confirmationEmail")
    send_date: Annotated[str | None, Blankable] = Field(default=None, alias="sendDate")

    @field_validator("confirmation_email", mode="before")
    @classmethod
    def split_emails(cls, value: Any) -> list[str]:
        if isinstance(value, list):
            value = [item.get("value", "") if isinstance(item, dict) else item for item in value]
        return split_csv(value)


class SendCampaignAction(Action):
    metadata = ActionMetadata(
        id="send_campaign",
        display_name="Send Campaign",
        description="Schedules a draft campaign for sending immediately or at a given date.",
        sample_output={
            "success": True,
            "message": "Campaign scheduled for sending",
            "CampaignID": "fc0ce7105baeaf97f47c99be31d02a91",
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("send_campaign", "Send Campaign")
            .dynamic("campaignId", "Campaign", get_draft_campaigns, required=True)
            .array("confirmationEmail", "Confirmation Emails", items=FieldType.EMAIL)
            .date_time("sendDate", "Send Date", description="YYYY-MM-DD HH:MM, or empty to send immediately.")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(SendCampaignInput, ctx.input, INTEGRATION)

        payload: dict[str, Any] = {"SendDate": "Immediately"}
        if data.confirmation_email:
            payload["ConfirmationEmail"] = ",".join(data.confirmation_email)
        if data.send_date:
            try:
                payload["SendDate"] = normalize_send_date(data.send_date)
            except ValueError as e:
                raise InputValidationError(
                    "invalid date format. Please use YYYY-MM-DD HH:MM format", INTEGRATION
                ) from e

        async with CampaignMonitorClient.from_context(ctx) as client:
            await client.post(f"/campaigns/{data.campaign_id}/send.json", json=payload)

        return {"success": True, "message": "Campaign scheduled for sending", "CampaignID": data.campaign_id}


class CampaignInput(StepInput):
    campaign_id: RequiredStr = Field(alias="campaignId")


class GetCampaignListsAndSegmentsAction(Action):
    metadata = ActionMetadata(
        id="get_campaign_lists_and_segments",
        display_name="Get Campaign Lists And Segments",
        description="Returns the lists and segments a campaign was sent to.",
        sample_output={
            "Lists": [{"ListID": "a58ee1d3039b8bec838e6d1482a8a965", "Name": "Newsletter"}],
            "Segments": [],
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("get_campaign_lists_and_segments", "Get Campaign Lists And Segments")
            .text("campaignId", "Campaign ID", required=True)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(CampaignInput, ctx.input, INTEGRATION)
        async with CampaignMonitorClient.from_context(ctx) as client:
            return await client.get(f"/campaigns/{data.campaign_id}/listsandsegments.json")
