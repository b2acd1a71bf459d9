"""Campaign Monitor integration."""

from ...sdk import AuthSchema, FormBuilder, Integration, IntegrationMetadata
from .actions import (
    AddSubscriberAction,
    CreateCampaignAction,
    GetCampaignListsAndSegmentsAction,
    GetSubscriberDetailsAction,
    GetSubscriberListsAction,
    ListAllCampaignsAction,
    ListSubscribersAction,
    SendCampaignAction,
)
from .client import CampaignMonitorClient
from .triggers import CampaignSentTrigger, SubscriberAddedTrigger


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="campaignmonitor",
            name="Campaign Monitor",
            description="Manage subscribers and send email campaigns with Campaign Monitor.",
            icon="mdi:email-newsletter",
            categories=("marketing",),
        ),
        auth=AuthSchema.custom(
            FormBuilder("campaignmonitor-auth", "Campaign Monitor")
            .secret("api-key", "API Key", required=True, description="Found under Account Settings > API keys.")
            .text("client-id", "Client ID", required=True)
            .build(),
        ),
        actions=(
            AddSubscriberAction(),
            GetSubscriberDetailsAction(),
            ListSubscribersAction(),
            GetSubscriberListsAction(),
            ListAllCampaignsAction(),
            CreateCampaignAction(),
            SendCampaignAction(),
            GetCampaignListsAndSegmentsAction(),
        ),
        triggers=(SubscriberAddedTrigger(), CampaignSentTrigger()),
    )


__all__ = ["CampaignMonitorClient", "create_integration"]
