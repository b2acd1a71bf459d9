"""Pinterest integration."""

from ...sdk import AuthSchema, Integration, IntegrationMetadata
from .actions import CreatePinAction, GetPinAnalyticsAction, SearchPinsAction, UpdatePinAction
from .client import PinterestClient
from .triggers import PinCreatedTrigger

SCOPES = (
    "pins:read",
    "pins:write",
    "boards:read",
    "boards:write",
    "ads:read",
    "ads:write",
    "boards:read_secret",
    "pins:read_secret",
    "user_accounts:read",
)


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="pinterest",
            name="Pinterest",
            description="Create and search pins and read pin analytics on Pinterest.",
            icon="logos:pinterest",
            categories=("social-media", "marketing"),
        ),
        auth=AuthSchema.oauth2(
            authorization_url="https://www.pinterest.com/oauth",
            token_url="https://api.pinterest.com/v5/oauth/token",
            scopes=SCOPES,
        ),
        actions=(
            CreatePinAction(),
            UpdatePinAction(),
            SearchPinsAction(),
            GetPinAnalyticsAction(),
        ),
        triggers=(PinCreatedTrigger(),),
    )


__all__ = ["PinterestClient", "create_integration"]
