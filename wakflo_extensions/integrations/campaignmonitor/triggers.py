"""Campaign Monitor triggers."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from ...sdk import (
    JSON,
    Blankable,
    ExecuteContext,
    FormBuilder,
    FormSchema,
    RequiredStr,
    StepInput,
    Trigger,
    TriggerMetadata,
    filter_since,
    parse_input,
)
from .client import CampaignMonitorClient, get_lists

INTEGRATION = "campaignmonitor"


class SubscriberAddedInput(StepInput):
    list_id: RequiredStr = Field(alias="listId")


class SubscriberAddedTrigger(Trigger):
    """
    Active subscribers added to a list since the last run.

    The ``date`` query parameter only has day precision; records from the
    boundary day are cut at the exact last-run time on their ``Date``.
    """

    metadata = TriggerMetadata(
        id="subscriber_added",
        display_name="Subscriber Added",
        description="Triggers when a subscriber is added to a list.",
        sample_output={
            "newSubscribers": [{"EmailAddress": "ada@example.com", "Name": "Ada", "Date": "2024-05-01 10:00:00"}],
            "listId": "a58ee1d3039b8bec838e6d1482a8a965",
            "sinceDate": "2024-05-01",
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("subscriber_added", "Subscriber Added")
            .dynamic("listId", "List", get_lists, required=True)
            .build()
        )

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(SubscriberAddedInput, ctx.input, INTEGRATION)
        last_run = ctx.last_run

        params: dict[str, str] = {}
        since_date = "N/A"
        if last_run is not None:
            since_date = last_run.strftime("%Y-%m-%d")
            params["date"] = since_date

        async with CampaignMonitorClient.from_context(ctx) as client:
            result = await client.get(f"/lists/{data.list_id}/active.json", params=params)

        records = (result.get("Results") or []) if isinstance(result, dict) else []
        return {
            "newSubscribers": filter_since(records, last_run, "Date"),
            "listId": data.list_id,
            "sinceDate": since_date,
        }


class CampaignSentInput(StepInput):
    client_id: Annotated[str | None, Blankable] = Field(default=None, alias="clientId")


class CampaignSentTrigger(Trigger):
    metadata = TriggerMetadata(
        id="campaign_sent",
        display_name="Campaign Sent",
        description="Triggers when a campaign has been sent.",
        sample_output={
            "newlySentCampaigns": [
                {"CampaignID": "fc0ce7105baeaf97f47c99be31d02a91", "Name": "May newsletter", "SentDate": "2024-05-01 10:00"}
            ],
            "count": 1,
            "clientId": "4a397ccaaa55eb4e6aa1221e1e2d7122",
        },
    )

    def properties(self) -> FormSchema:
        return (
            FormBuilder("campaign_sent", "Campaign Sent")
            .text("clientId", "Client ID", description="Defaults to the client ID of the connection.")
            .build()
        )

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(CampaignSentInput, ctx.input, INTEGRATION)
        last_run = ctx.last_run

        async with CampaignMonitorClient.from_context(ctx) as client:
            client_id = client.require_client_id(data.client_id)
            campaigns = await client.client_resource("campaigns", client_id)

        sent = filter_since(campaigns, last_run, "SentDate")
        return {"newlySentCampaigns": sent, "count": len(sent), "clientId": client_id}
