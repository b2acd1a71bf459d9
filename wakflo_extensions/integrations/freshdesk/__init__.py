"""Freshdesk integration."""

from ...sdk import AuthSchema, FormBuilder, Integration, IntegrationMetadata
from .actions import CreateTicketAction, GetTicketAction, SearchTicketsAction, UpdateTicketAction
from .client import FreshdeskClient, build_freshdesk_url
from .triggers import TicketCreatedTrigger


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="freshdesk",
            name="Freshdesk",
            description="Create, update and search Freshdesk support tickets.",
            icon="simple-icons:freshdesk",
            categories=("customer-support",),
        ),
        auth=AuthSchema.custom(
            FormBuilder("freshdesk-auth", "Freshdesk")
            .text("domain", "Domain", required=True, placeholder="yourcompany", description="Your Freshdesk subdomain.")
            .secret("api-key", "API Key", required=True, description="Found under Profile Settings.")
            .build(),
        ),
        actions=(
            CreateTicketAction(),
            UpdateTicketAction(),
            GetTicketAction(),
            SearchTicketsAction(),
        ),
        triggers=(TicketCreatedTrigger(),),
    )


__all__ = ["FreshdeskClient", "build_freshdesk_url", "create_integration"]
