"""Mailchimp polling triggers."""

from __future__ import annotations

from pydantic import Field

from ...sdk import (
    JSON,
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
from ...sdk.polling import rfc3339
from .client import MailchimpClient, get_audiences

INTEGRATION = "mailchimp"


class ListInput(StepInput):
    list_id: RequiredStr = Field(alias="list-id")


def _list_form(form_id: str, title: str) -> FormSchema:
    return (
        FormBuilder(form_id, title)
        .dynamic("list-id", "Audience", get_audiences, required=True)
        .build()
    )


class NewSubscriberTrigger(Trigger):
    """Members who opted in after the last run."""

    metadata = TriggerMetadata(
        id="new_subscriber",
        display_name="New Subscriber",
        description="Triggers when a new subscriber is added to an audience.",
        sample_output=[
            {
                "id": "852aaa9532cb36adfb5e9fef7a4206a9",
                "email_address": "ada@example.com",
                "status": "subscribed",
                "timestamp_opt": "2024-05-01T10:00:00+00:00",
            }
        ],
    )

    def properties(self) -> FormSchema:
        return _list_form("new_subscriber", "New Subscriber")

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(ListInput, ctx.input, INTEGRATION)
        last_run = ctx.last_run

        params = {"count": 1000}
        if last_run is not None:
            params["since_timestamp_opt"] = rfc3339(last_run)

        async with MailchimpClient.from_context(ctx) as client:
            members = await client.list_members(data.list_id, params)
        return filter_since(members, last_run, "timestamp_opt")


class UnsubscriberTrigger(Trigger):
    """Members who unsubscribed after the last run."""

    metadata = TriggerMetadata(
        id="unsubscriber",
        display_name="Unsubscriber",
        description="Triggers when a subscriber unsubscribes from an audience.",
        sample_output=[
            {
                "id": "852aaa9532cb36adfb5e9fef7a4206a9",
                "email_address": "ada@example.com",
                "status": "unsubscribed",
                "last_changed": "2024-05-02T08:30:00+00:00",
            }
        ],
    )

    def properties(self) -> FormSchema:
        return _list_form("unsubscriber", "Unsubscriber")

    async def execute(self, ctx: ExecuteContext) -> JSON:
        data = parse_input(ListInput, ctx.input, INTEGRATION)
        last_run = ctx.last_run

        params = {"count": 1000, "status": "unsubscribed"}
        if last_run is not None:
            params["unsubscribed_since"] = rfc3339(last_run)

        async with MailchimpClient.from_context(ctx) as client:
            members = await client.list_members(data.list_id, params)
        return filter_since(members, last_run, "last_changed")
