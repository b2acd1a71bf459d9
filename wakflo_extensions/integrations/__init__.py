"""
Bundled integrations.

Each subpackage follows the same layout:

    integrations/
    ├── todoist/
    │   ├── __init__.py   # create_integration()
    │   ├── client.py     # ConnectorClient subclass + dynamic option resolvers
    │   ├── actions.py    # Action subclasses and their input models
    │   └── triggers.py   # Polling triggers (where the service has any)
    └── ...

Usage:
    from wakflo_extensions.integrations import default_registry

    registry = default_registry()
    trigger = registry.find_trigger("freshdesk", "ticket_created")
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable

from ..sdk import Integration, IntegrationRegistry
from . import (
    campaignmonitor,
    discord,
    freshdesk,
    ghostcms,
    googlesheets,
    hubspot,
    jiracloud,
    mailchimp,
    pinterest,
    telegrambot,
    todoist,
    zohocrm,
)

ALL_INTEGRATIONS: tuple[Callable[[], Integration], ...] = (
    googlesheets.create_integration,
    mailchimp.create_integration,
    telegrambot.create_integration,
    discord.create_integration,
    freshdesk.create_integration,
    campaignmonitor.create_integration,
    ghostcms.create_integration,
    jiracloud.create_integration,
    hubspot.create_integration,
    todoist.create_integration,
    pinterest.create_integration,
    zohocrm.create_integration,
)


def build_registry() -> IntegrationRegistry:
    """Create a fresh registry holding every bundled integration."""
    registry = IntegrationRegistry()
    registry.register_many([factory() for factory in ALL_INTEGRATIONS])
    return registry


@lru_cache()
def default_registry() -> IntegrationRegistry:
    """
    Get the shared registry of bundled integrations.

    Uses lru_cache so integrations are built once per process.
    """
    return build_registry()


__all__ = ["ALL_INTEGRATIONS", "build_registry", "default_registry"]
