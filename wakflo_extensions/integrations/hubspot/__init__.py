"""HubSpot integration."""

from ...sdk import AuthSchema, Integration, IntegrationMetadata
from .actions import CreateContactAction, CreateTicketAction, RetrieveContactAction, SearchOwnerAction
from .client import HubSpotClient, search_body
from .triggers import ContactUpdatedTrigger, DealUpdatedTrigger, TaskCreatedTrigger, TicketUpdatedTrigger


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="hubspot",
            name="HubSpot",
            description="Manage contacts and tickets and react to CRM changes in HubSpot.",
            icon="logos:hubspot",
            categories=("crm", "marketing"),
        ),
        auth=AuthSchema.oauth2(
            authorization_url="https://app.hubspot.com/oauth/authorize",
            token_url="https://api.hubapi.com/oauth/v1/token",
            scopes=(
                "crm.objects.contacts.read",
                "crm.objects.contacts.write",
                "crm.objects.deals.read",
                "crm.objects.owners.read",
                "tickets",
            ),
        ),
        actions=(
            CreateContactAction(),
            RetrieveContactAction(),
            CreateTicketAction(),
            SearchOwnerAction(),
        ),
        triggers=(
            ContactUpdatedTrigger(),
            DealUpdatedTrigger(),
            TicketUpdatedTrigger(),
            TaskCreatedTrigger(),
        ),
    )


__all__ = ["HubSpotClient", "create_integration", "search_body"]
