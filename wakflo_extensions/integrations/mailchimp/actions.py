"""Mailchimp actions."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field

from ...sdk import (
    JSON,
    Action,
    ActionMetadata,
    Blankable,
    FormBuilder,
    FormSchema,
    InputValidationError,
    PerformContext,
    RequiredStr,
    StepInput,
    parse_input,
)
from ...sdk.inputs import split_csv
from .client import MEMBER_STATUSES, MailchimpClient, get_audiences

INTEGRATION = "mailchimp"

MemberStatus = Literal["subscribed", "unsubscribed", "cleaned", "pending", "transactional"]


def _audience_form(form_id: str, title: str) -> FormBuilder:
    return (
        FormBuilder(form_id, title)
        .dynamic("list-id", "Audience", get_audiences, required=True, description="The audience (list) to use.")
        .email("email", "Email", required=True, description="Email address of the subscriber.")
    )


class _MemberInput(StepInput):
    list_id: RequiredStr = Field(alias="list-id")
    email: RequiredStr


# =============================================================================
# Add member to list
# =============================================================================


class AddMemberInput(_MemberInput):
    status: MemberStatus = "subscribed"
    first_name: Annotated[str | None, Blankable] = Field(default=None, alias="first-name")
    last_name: Annotated[str | None, Blankable] = Field(default=None, alias="last-name")


class AddMemberToListAction(Action):
    metadata = ActionMetadata(
        id="add_member_to_list",
        display_name="Add Member To List",
        description="Adds a new contact to a Mailchimp audience.",
        sample_output={"success": "Contact Added!"},
    )

    def properties(self) -> FormSchema:
        return (
            _audience_form("add_member_to_list", "Add Member To List")
            .text("first-name", "First Name")
            .text("last-name", "Last Name")
            .select("status", "Status", MEMBER_STATUSES, required=True, default="subscribed")
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(AddMemberInput, ctx.input, INTEGRATION)
        payload = {
            "email_address": data.email,
            "status": data.status,
            "merge_fields": {"FNAME": data.first_name or "", "LNAME": data.last_name or ""},
        }
        async with MailchimpClient.from_context(ctx) as client:
            await client.add_member(data.list_id, payload)
        return {"success": "Contact Added!"}


# =============================================================================
# Tags
# =============================================================================


class TagInput(_MemberInput):
    tag_names: RequiredStr = Field(alias="tag-names")

    def tags(self) -> list[str]:
        return split_csv(self.tag_names)


def _tag_form(form_id: str, title: str) -> FormSchema:
    return (
        _audience_form(form_id, title)
        .text("tag-names", "Tags", required=True, description="Comma separated tag names, e.g. vip, new")
        .build()
    )


class AddSubscriberToTagAction(Action):
    metadata = ActionMetadata(
        id="add_subscriber_to_tag",
        display_name="Add Subscriber To Tag",
        description="Adds one or more tags to an audience member.",
        sample_output={"status": "Tag added!"},
    )

    def properties(self) -> FormSchema:
        return _tag_form("add_subscriber_to_tag", "Add Subscriber To Tag")

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(TagInput, ctx.input, INTEGRATION)
        tags = data.tags()
        if not tags:
            raise InputValidationError("at least one tag name is required", INTEGRATION)
        async with MailchimpClient.from_context(ctx) as client:
            await client.set_tags(data.list_id, data.email, tags, "active")
        return {"status": "Tag added!"}


class RemoveSubscriberFromTagAction(Action):
    metadata = ActionMetadata(
        id="remove_subscriber_from_tag",
        display_name="Remove Subscriber From Tag",
        description="Removes one or more tags from an audience member.",
        sample_output={"status": "Tag removed!"},
    )

    def properties(self) -> FormSchema:
        return _tag_form("remove_subscriber_from_tag", "Remove Subscriber From Tag")

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(TagInput, ctx.input, INTEGRATION)
        tags = data.tags()
        if not tags:
            raise InputValidationError("at least one tag name is required", INTEGRATION)
        async with MailchimpClient.from_context(ctx) as client:
            await client.set_tags(data.list_id, data.email, tags, "inactive")
        return {"status": "Tag removed!"}


# =============================================================================
# Status and notes
# =============================================================================


class UpdateStatusInput(_MemberInput):
    status: MemberStatus


class UpdateSubscriberStatusAction(Action):
    metadata = ActionMetadata(
        id="update_subscriber_status",
        display_name="Update Subscriber Status",
        description="Changes the subscription status of an audience member.",
        sample_output={"id": "852aaa9532cb36adfb5e9fef7a4206a9", "email_address": "ada@example.com", "status": "unsubscribed"},
    )

    def properties(self) -> FormSchema:
        return (
            _audience_form("update_subscriber_status", "Update Subscriber Status")
            .select("status", "Status", MEMBER_STATUSES, required=True)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(UpdateStatusInput, ctx.input, INTEGRATION)
        async with MailchimpClient.from_context(ctx) as client:
            return await client.update_member(data.list_id, data.email, {"status": data.status})


class AddNoteInput(_MemberInput):
    note: RequiredStr


class AddNoteToSubscriberAction(Action):
    metadata = ActionMetadata(
        id="add_note_to_subscriber",
        display_name="Add Note To Subscriber",
        description="Adds a note to an audience member.",
        sample_output={"id": 42, "note": "Met at the conference", "created_at": "2024-05-01T10:00:00+00:00"},
    )

    def properties(self) -> FormSchema:
        return (
            _audience_form("add_note_to_subscriber", "Add Note To Subscriber")
            .long_text("note", "Note", required=True)
            .build()
        )

    async def perform(self, ctx: PerformContext) -> JSON:
        data = parse_input(AddNoteInput, ctx.input, INTEGRATION)
        async with MailchimpClient.from_context(ctx) as client:
            return await client.add_note(data.list_id, data.email, data.note)
