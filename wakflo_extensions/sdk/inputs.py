"""
Decoding of step input into typed models.

Each action declares a pydantic model for its input. ``parse_input``
validates the raw dict supplied by the host and converts pydantic's
errors into InputValidationError, so a blank required field fails before
any request is built.
"""

from __future__ import annotations

from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from .errors import InputValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Non-empty, whitespace-stripped string.
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# Optional value where "" means "not provided".
Blankable = BeforeValidator(_blank_to_none)


class StepInput(BaseModel):
    """Base for action/trigger input models."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


def _field_name(error: dict[str, Any]) -> str:
    location = error.get("loc") or ()
    return ".".join(str(part) for part in location) or "input"


def parse_input(model: type[ModelT], data: dict[str, Any] | None, integration: str) -> ModelT:
    """
    Validate raw step input against ``model``.

    Raises:
        InputValidationError: Listing every failing field
    """
    try:
        return model.model_validate(data or {})
    except PydanticValidationError as e:
        errors = e.errors(include_url=False)
        fields = ", ".join(_field_name(err) for err in errors)
        raise InputValidationError(
            f"invalid input: {fields}",
            integration,
            errors=[{"field": _field_name(err), "message": err.get("msg", "")} for err in errors],
        ) from e


def split_csv(value: str | list[str] | None) -> list[str]:
    """Split a comma separated string (or list) into trimmed, non-empty items."""
    if value is None:
        return []
    parts = value if isinstance(value, list) else value.split(",")
    return [p.strip() for p in parts if p and p.strip()]


def drop_empty(payload: dict[str, Any]) -> dict[str, Any]:
    """Remove None and blank-string values from a request payload."""
    return {
        k: v
        for k, v in payload.items()
        if v is not None and not (isinstance(v, str) and not v.strip())
    }
