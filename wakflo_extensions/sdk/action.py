"""
Action and trigger contracts.

An Action is one workflow step that calls a remote API once (or a short
fixed sequence of calls) and returns JSON. A Trigger is polled by the host
and returns the records that are new since the previous poll.

Usage:
    class CreateTaskAction(Action):
        metadata = ActionMetadata(
            id="create_task",
            display_name="Create Task",
            description="Create a new task.",
        )

        def properties(self) -> FormSchema:
            return FormBuilder("create_task", "Create Task").text(
                "content", "Content", required=True
            ).build()

        async def perform(self, ctx: PerformContext) -> JSON:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .auth import AuthSchema
from .context import ExecuteContext, PerformContext
from .forms import FormSchema
from .types import JSON


@dataclass(frozen=True, slots=True)
class ActionMetadata:
    """Static description of an action."""

    id: str
    display_name: str
    description: str
    documentation: str = ""
    icon: str | None = None
    sample_output: JSON = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "description": self.description,
            "documentation": self.documentation,
            "icon": self.icon,
            "sampleOutput": self.sample_output,
        }


class TriggerType(Enum):
    """How the host invokes a trigger."""

    POLLING = "polling"
    WEBHOOK = "webhook"


@dataclass(frozen=True, slots=True)
class TriggerMetadata:
    """Static description of a trigger."""

    id: str
    display_name: str
    description: str
    type: TriggerType = TriggerType.POLLING
    documentation: str = ""
    icon: str | None = None
    sample_output: JSON = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "description": self.description,
            "type": self.type.value,
            "documentation": self.documentation,
            "icon": self.icon,
            "sampleOutput": self.sample_output,
        }


class Action(ABC):
    """Base class for actions."""

    metadata: ActionMetadata

    @property
    def id(self) -> str:
        return self.metadata.id

    @abstractmethod
    def properties(self) -> FormSchema:
        """Input form for this action."""
        ...

    def auth(self) -> AuthSchema | None:
        """Action-specific auth. None means the integration's auth applies."""
        return None

    @abstractmethod
    async def perform(self, ctx: PerformContext) -> JSON:
        """
        Run the action.

        Raises:
            ConnectorError: Any validation, auth, transport or remote failure
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r})"


class Trigger(ABC):
    """Base class for triggers."""

    metadata: TriggerMetadata

    @property
    def id(self) -> str:
        return self.metadata.id

    @abstractmethod
    def properties(self) -> FormSchema:
        """Input form for this trigger."""
        ...

    def auth(self) -> AuthSchema | None:
        return None

    async def start(self, ctx: ExecuteContext) -> None:
        """Lifecycle hook. Polling triggers have nothing to set up."""
        return None

    async def stop(self, ctx: ExecuteContext) -> None:
        """Lifecycle hook. Polling triggers have nothing to tear down."""
        return None

    @abstractmethod
    async def execute(self, ctx: ExecuteContext) -> JSON:
        """Poll once and return new records."""
        ...

    def criteria(self) -> dict[str, Any]:
        """Host-side filter criteria applied to trigger output."""
        return {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r})"
