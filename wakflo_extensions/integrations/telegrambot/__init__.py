"""Telegram bot integration."""

from ...sdk import AuthSchema, FormBuilder, Integration, IntegrationMetadata
from .actions import (
    CreateInviteLinkAction,
    GetChatAdministratorsAction,
    GetChatMemberAction,
    SendPhotoAction,
    SendTextMessageAction,
)
from .client import TelegramClient
from .triggers import MessageReceivedTrigger


def create_integration() -> Integration:
    return Integration(
        metadata=IntegrationMetadata(
            id="telegrambot",
            name="Telegram Bot",
            description="Send messages and manage chats with a Telegram bot.",
            icon="logos:telegram",
            categories=("communication",),
        ),
        auth=AuthSchema.custom(
            FormBuilder("telegram-auth", "Telegram Bot")
            .secret("token", "Bot Token", required=True, description="Token issued by @BotFather.")
            .build(),
        ),
        actions=(
            SendTextMessageAction(),
            SendPhotoAction(),
            CreateInviteLinkAction(),
            GetChatMemberAction(),
            GetChatAdministratorsAction(),
        ),
        triggers=(MessageReceivedTrigger(),),
    )


__all__ = ["TelegramClient", "create_integration"]
