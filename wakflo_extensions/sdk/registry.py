"""
Integration registry.

The registry holds the integrations a host process exposes. Integrations
are registered once at startup and are immutable afterwards.

Usage:
    registry = IntegrationRegistry()
    registry.register(create_todoist_integration())

    action = registry.find_action("todoist", "create_task")
    result = await action.perform(ctx)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .action import Action, Trigger
    from .integration import Integration

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Error in registry operations."""

    pass


class IntegrationRegistry:
    """Registry of available integrations, keyed by id."""

    def __init__(self) -> None:
        self._integrations: dict[str, Integration] = {}

    def register(self, integration: Integration) -> None:
        """
        Register an integration.

        Raises:
            RegistryError: If the id is already registered or the
                integration is invalid
        """
        if integration.id in self._integrations:
            raise RegistryError(
                f"Integration '{integration.id}' already registered. Use a unique id or unregister first."
            )

        self._validate(integration)
        self._integrations[integration.id] = integration
        logger.info(
            f"[registry] Registered integration: {integration.id} "
            f"({len(integration.actions)} actions, {len(integration.triggers)} triggers)"
        )

    def register_many(self, integrations: list[Integration]) -> None:
        for integration in integrations:
            self.register(integration)

    def unregister(self, integration_id: str) -> bool:
        """Unregister an integration. Returns True if it was registered."""
        if integration_id in self._integrations:
            del self._integrations[integration_id]
            logger.debug(f"[registry] Unregistered integration: {integration_id}")
            return True
        return False

    def get(self, integration_id: str) -> Integration | None:
        return self._integrations.get(integration_id)

    def get_required(self, integration_id: str) -> Integration:
        """
        Get an integration by id, raising if not found.

        Raises:
            RegistryError: If not found
        """
        integration = self._integrations.get(integration_id)
        if integration is None:
            available = ", ".join(sorted(self._integrations)) or "none"
            raise RegistryError(f"Integration '{integration_id}' not found. Available: {available}")
        return integration

    def find_action(self, integration_id: str, action_id: str) -> Action:
        integration = self.get_required(integration_id)
        action = integration.get_action(action_id)
        if action is None:
            raise RegistryError(f"Action '{action_id}' not found in integration '{integration_id}'")
        return action

    def find_trigger(self, integration_id: str, trigger_id: str) -> Trigger:
        integration = self.get_required(integration_id)
        trigger = integration.get_trigger(trigger_id)
        if trigger is None:
            raise RegistryError(f"Trigger '{trigger_id}' not found in integration '{integration_id}'")
        return trigger

    def list_integrations(self) -> list[Integration]:
        return list(self._integrations.values())

    def list_ids(self) -> list[str]:
        return list(self._integrations.keys())

    def describe(self) -> list[dict[str, Any]]:
        """Export descriptors for every registered integration."""
        return [integration.describe() for integration in self._integrations.values()]

    def _validate(self, integration: Integration) -> None:
        if not integration.id:
            raise RegistryError("Integration id cannot be empty")
        if not integration.metadata.name:
            raise RegistryError(f"Integration '{integration.id}' must have a name")

        for item in (*integration.actions, *integration.triggers):
            if not item.metadata.display_name:
                raise RegistryError(f"'{integration.id}.{item.id}' must have a display name")
            form = item.properties()
            if form is None:
                raise RegistryError(f"'{integration.id}.{item.id}' must declare properties")

    def __len__(self) -> int:
        return len(self._integrations)

    def __contains__(self, integration_id: str) -> bool:
        return integration_id in self._integrations

    def __repr__(self) -> str:
        return f"IntegrationRegistry(integrations={self.list_ids()})"
