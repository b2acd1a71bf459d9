"""Mailchimp integration."""

from ...sdk import AuthSchema, Integration, IntegrationMetadata
from .actions import (
    AddMemberToListAction,
    AddNoteToSubscriberAction,
    AddSubscriberToTagAction,
    RemoveSubscriberFromTagAction,
    UpdateSubscriberStatusAction,
)
from .client import MailchimpClient, subscriber_hash
from .triggers import NewSubscriberTrigger, UnsubscriberTrigger


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="mailchimp",
            name="Mailchimp",
            description="Manage Mailchimp audiences, members and tags.",
            icon="logos:mailchimp-freddie",
            categories=("marketing", "email"),
        ),
        auth=AuthSchema.oauth2(
            authorization_url="https://login.mailchimp.com/oauth2/authorize",
            token_url="https://login.mailchimp.com/oauth2/token",
            description="Connect your Mailchimp account.",
        ),
        actions=(
            AddMemberToListAction(),
            AddSubscriberToTagAction(),
            RemoveSubscriberFromTagAction(),
            UpdateSubscriberStatusAction(),
            AddNoteToSubscriberAction(),
        ),
        triggers=(NewSubscriberTrigger(), UnsubscriberTrigger()),
    )


__all__ = ["MailchimpClient", "create_integration", "subscriber_hash"]
