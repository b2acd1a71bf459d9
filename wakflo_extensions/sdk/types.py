"""Shared type aliases."""

from __future__ import annotations

from typing import Any, TypeAlias

# Generic JSON value produced by actions and triggers.
JSON: TypeAlias = dict[str, Any] | list[Any] | str | int | float | bool | None

JSONObject: TypeAlias = dict[str, Any]
