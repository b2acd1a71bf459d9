"""
Per-invocation contexts handed to actions, triggers and option resolvers.

Contexts are created by the host for one call and discarded afterwards.
Nothing here is shared between invocations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from ..config import ConnectorSettings, get_settings
from .auth import AuthContext
from .forms import Option
from .polling import parse_timestamp

LAST_RUN_KEY = "lastRun"


@dataclass
class InvocationContext:
    """
    Fields common to every invocation.

    Attributes:
        input: Step configuration as entered in the form
        auth: Credentials resolved by the host
        settings: Connector settings (defaults to the environment)
        transport: Optional httpx transport used by connector clients
    """

    input: dict[str, Any] = field(default_factory=dict)
    auth: AuthContext = field(default_factory=AuthContext)
    settings: ConnectorSettings = field(default_factory=get_settings)
    transport: httpx.AsyncBaseTransport | None = None

    def value(self, key: str, default: Any = None) -> Any:
        """Get a raw input value, treating blank strings as missing."""
        value = self.input.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        return value


@dataclass
class PerformContext(InvocationContext):
    """Context for Action.perform."""


@dataclass
class ExecuteContext(InvocationContext):
    """
    Context for Trigger.execute.

    ``metadata`` is owned by the host and persisted between polls. The
    only key every trigger relies on is ``lastRun``; some triggers keep
    their own cursors next to it (e.g. Telegram's ``lastUpdateID``).
    """

    metadata: dict[str, Any] = field(default_factory=dict)

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def set_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    @property
    def last_run(self) -> datetime | None:
        """Last successful poll time, or None on the first run."""
        return parse_timestamp(self.metadata.get(LAST_RUN_KEY))

    def set_last_run(self, value: datetime) -> None:
        self.metadata[LAST_RUN_KEY] = value


@dataclass
class DynamicFieldContext(InvocationContext):
    """Context for dynamic option resolvers."""

    search: str | None = None

    def respond(self, options: list[Option]) -> list[Option]:
        """Filter options by the current search text (case-insensitive)."""
        if not self.search:
            return options
        needle = self.search.lower()
        return [o for o in options if needle in o.name.lower()]
