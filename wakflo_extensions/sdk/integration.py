"""Integration descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .action import Action, Trigger
from .auth import AuthSchema


@dataclass(frozen=True, slots=True)
class IntegrationMetadata:
    """Static description of an integration."""

    id: str
    name: str
    description: str
    icon: str = ""
    version: str = "0.0.1"
    categories: tuple[str, ...] = ()
    authors: tuple[str, ...] = ("Wakflo <integrations@wakflo.com>",)
    documentation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "version": self.version,
            "categories": list(self.categories),
            "authors": list(self.authors),
            "documentation": self.documentation,
        }


@dataclass(frozen=True)
class Integration:
    """
    One third-party service: metadata, auth and its actions/triggers.

    Built once when the integration is registered and shared read-only by
    every invocation afterwards.
    """

    metadata: IntegrationMetadata
    auth: AuthSchema
    actions: tuple[Action, ...] = ()
    triggers: tuple[Trigger, ...] = ()
    _actions_by_id: dict[str, Action] = field(init=False, repr=False, compare=False)
    _triggers_by_id: dict[str, Trigger] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_actions_by_id", _index(self.metadata.id, "action", self.actions))
        object.__setattr__(self, "_triggers_by_id", _index(self.metadata.id, "trigger", self.triggers))

    @property
    def id(self) -> str:
        return self.metadata.id

    def get_action(self, action_id: str) -> Action | None:
        return self._actions_by_id.get(action_id)

    def get_trigger(self, trigger_id: str) -> Trigger | None:
        return self._triggers_by_id.get(trigger_id)

    def auth_for(self, item: Action | Trigger) -> AuthSchema:
        """Auth that applies to an action or trigger of this integration."""
        return item.auth() or self.auth

    def describe(self) -> dict[str, Any]:
        """JSON descriptor for host UIs."""
        return {
            **self.metadata.to_dict(),
            "auth": self.auth.to_dict(),
            "actions": [
                {**a.metadata.to_dict(), "properties": a.properties().to_json_schema()}
                for a in self.actions
            ],
            "triggers": [
                {**t.metadata.to_dict(), "properties": t.properties().to_json_schema()}
                for t in self.triggers
            ],
        }


def _index(integration_id: str, kind: str, items: tuple[Any, ...]) -> dict[str, Any]:
    indexed: dict[str, Any] = {}
    for item in items:
        if item.id in indexed:
            raise ValueError(f"Duplicate {kind} '{item.id}' in integration '{integration_id}'")
        indexed[item.id] = item
    return indexed
