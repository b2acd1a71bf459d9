"""Discord integration."""

from ...sdk import AuthSchema, FormBuilder, Integration, IntegrationMetadata
from .actions import (
    FindChannelAction,
    FindGuildMemberAction,
    ListGuildMembersAction,
    SendChannelMessageAction,
)
from .client import DiscordClient, snowflake_from_datetime
from .triggers import NewMessageTrigger


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="discord",
            name="Discord",
            description="Find channels and members and react to messages in Discord servers.",
            icon="logos:discord-icon",
            categories=("communication",),
        ),
        auth=AuthSchema.custom(
            FormBuilder("discord-auth", "Discord Bot")
            .secret("token", "Bot Token", required=True, description="Bot token from the Discord developer portal.")
            .build(),
        ),
        actions=(
            FindChannelAction(),
            ListGuildMembersAction(),
            FindGuildMemberAction(),
            SendChannelMessageAction(),
        ),
        triggers=(NewMessageTrigger(),),
    )


__all__ = ["DiscordClient", "create_integration", "snowflake_from_datetime"]
