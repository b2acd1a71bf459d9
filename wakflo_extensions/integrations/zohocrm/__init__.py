"""Zoho CRM integration."""

from ...sdk import AuthSchema, Integration, IntegrationMetadata
from .actions import GetRecordAction, ListRecordsAction, SearchRecordsAction, UpdateRecordAction
from .client import ZohoCRMClient
from .triggers import NewRecordCreatedTrigger, RecordUpdatedTrigger


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="zohocrm",
            name="Zoho CRM",
            description="Read, search and update Zoho CRM records.",
            icon="simple-icons:zoho",
            categories=("crm",),
        ),
        auth=AuthSchema.oauth2(
            authorization_url="https://accounts.zoho.com/oauth/v2/auth",
            token_url="https://accounts.zoho.com/oauth/v2/token",
            scopes=("ZohoCRM.modules.ALL", "ZohoCRM.settings.modules.READ"),
        ),
        actions=(
            GetRecordAction(),
            ListRecordsAction(),
            SearchRecordsAction(),
            UpdateRecordAction(),
        ),
        triggers=(NewRecordCreatedTrigger(), RecordUpdatedTrigger()),
    )


__all__ = ["ZohoCRMClient", "create_integration"]
