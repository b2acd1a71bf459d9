"""
Form schemas for action, trigger and auth inputs.

A FormSchema lists the fields the host renders for a workflow step. Fields
with a DynamicOptions resolver are populated at render time from live API
data; a resolver may read earlier fields (``depends_on``) from the
partially filled input.

Usage:
    form = (
        FormBuilder("find_channel", "Find Channel")
        .dynamic("guild-id", "Guild", get_guilds, required=True)
        .dynamic("channel-id", "Channel", get_channels, depends_on=["guild-id"])
        .text("name", "Channel Name", required=True)
        .build()
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable

if TYPE_CHECKING:
    from .context import DynamicFieldContext


class FieldType(Enum):
    """Input widget types understood by the host."""

    TEXT = "text"
    LONG_TEXT = "long_text"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    ARRAY = "array"
    DATE_TIME = "date_time"
    EMAIL = "email"
    URL = "url"
    SECRET = "secret"

    @property
    def json_type(self) -> str:
        return _JSON_TYPES.get(self, "string")


_JSON_TYPES = {
    FieldType.NUMBER: "number",
    FieldType.CHECKBOX: "boolean",
    FieldType.ARRAY: "array",
    FieldType.MULTI_SELECT: "array",
}


@dataclass(frozen=True, slots=True)
class Option:
    """A selectable ``{id, name}`` pair."""

    id: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name}


OptionsResolver = Callable[["DynamicFieldContext"], Awaitable[list[Option]]]


@dataclass(frozen=True, slots=True)
class DynamicOptions:
    """Live option source attached to a field."""

    resolver: OptionsResolver
    depends_on: tuple[str, ...] = ()
    searchable: bool = True


@dataclass(frozen=True, slots=True)
class FormField:
    """One input field."""

    key: str
    display_name: str
    type: FieldType = FieldType.TEXT
    description: str = ""
    required: bool = False
    placeholder: str | None = None
    default: Any = None
    options: tuple[Option, ...] = ()
    dynamic: DynamicOptions | None = None
    items: FieldType | None = None

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": self.type.json_type,
            "title": self.display_name,
            "x-widget": self.type.value,
        }
        if self.description:
            schema["description"] = self.description
        if self.placeholder:
            schema["x-placeholder"] = self.placeholder
        if self.default is not None:
            schema["default"] = self.default
        if self.options:
            schema["enum"] = [option.id for option in self.options]
            schema["x-options"] = [option.to_dict() for option in self.options]
        if self.dynamic is not None:
            schema["x-dynamic"] = True
            if self.dynamic.depends_on:
                schema["x-depends-on"] = list(self.dynamic.depends_on)
        if self.type.json_type == "array":
            schema["items"] = {"type": (self.items or FieldType.TEXT).json_type}
        return schema


class FormSchemaError(ValueError):
    """Raised when a form is built with inconsistent fields."""


@dataclass(frozen=True, slots=True)
class FormSchema:
    """Ordered, immutable set of fields."""

    id: str
    title: str
    fields: tuple[FormField, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for form_field in self.fields:
            if form_field.key in seen:
                raise FormSchemaError(f"Duplicate field '{form_field.key}' in form '{self.id}'")
            # Dependencies must be declared before the field that reads them.
            if form_field.dynamic is not None:
                for dependency in form_field.dynamic.depends_on:
                    if dependency not in seen:
                        raise FormSchemaError(
                            f"Field '{form_field.key}' depends on unknown field '{dependency}'"
                        )
            seen.add(form_field.key)

    @property
    def required_keys(self) -> list[str]:
        return [f.key for f in self.fields if f.required]

    def get(self, key: str) -> FormField | None:
        for form_field in self.fields:
            if form_field.key == key:
                return form_field
        return None

    def to_json_schema(self) -> dict[str, Any]:
        """Export as JSON Schema (object with properties and required)."""
        return {
            "type": "object",
            "title": self.title,
            "properties": {f.key: f.to_json_schema() for f in self.fields},
            "required": self.required_keys,
        }

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class FormBuilder:
    """Fluent builder producing a FormSchema."""

    def __init__(self, form_id: str, title: str) -> None:
        self._id = form_id
        self._title = title
        self._fields: list[FormField] = []

    def add(self, form_field: FormField) -> FormBuilder:
        self._fields.append(form_field)
        return self

    def _field(self, key: str, display_name: str, field_type: FieldType, **kwargs: Any) -> FormBuilder:
        return self.add(FormField(key=key, display_name=display_name, type=field_type, **kwargs))

    def text(self, key: str, display_name: str, **kwargs: Any) -> FormBuilder:
        return self._field(key, display_name, FieldType.TEXT, **kwargs)

    def long_text(self, key: str, display_name: str, **kwargs: Any) -> FormBuilder:
        return self._field(key, display_name, FieldType.LONG_TEXT, **kwargs)

    def email(self, key: str, display_name: str, **kwargs: Any) -> FormBuilder:
        return self._field(key, display_name, FieldType.EMAIL, **kwargs)

    def url(self, key: str, display_name: str, **kwargs: Any) -> FormBuilder:
        return self._field(key, display_name, FieldType.URL, **kwargs)

    def secret(self, key: str, display_name: str, **kwargs: Any) -> FormBuilder:
        return self._field(key, display_name, FieldType.SECRET, **kwargs)

    def number(self, key: str, display_name: str, **kwargs: Any) -> FormBuilder:
        return self._field(key, display_name, FieldType.NUMBER, **kwargs)

    def checkbox(self, key: str, display_name: str, **kwargs: Any) -> FormBuilder:
        return self._field(key, display_name, FieldType.CHECKBOX, **kwargs)

    def date_time(self, key: str, display_name: str, **kwargs: Any) -> FormBuilder:
        return self._field(key, display_name, FieldType.DATE_TIME, **kwargs)

    def array(self, key: str, display_name: str, *, items: FieldType = FieldType.TEXT, **kwargs: Any) -> FormBuilder:
        return self._field(key, display_name, FieldType.ARRAY, items=items, **kwargs)

    def select(
        self,
        key: str,
        display_name: str,
        options: list[tuple[str, str]] | list[Option],
        **kwargs: Any,
    ) -> FormBuilder:
        resolved = tuple(o if isinstance(o, Option) else Option(id=o[0], name=o[1]) for o in options)
        return self._field(key, display_name, FieldType.SELECT, options=resolved, **kwargs)

    def dynamic(
        self,
        key: str,
        display_name: str,
        resolver: OptionsResolver,
        *,
        depends_on: list[str] | tuple[str, ...] = (),
        multi: bool = False,
        **kwargs: Any,
    ) -> FormBuilder:
        return self._field(
            key,
            display_name,
            FieldType.MULTI_SELECT if multi else FieldType.SELECT,
            dynamic=DynamicOptions(resolver=resolver, depends_on=tuple(depends_on)),
            **kwargs,
        )

    def build(self) -> FormSchema:
        return FormSchema(id=self._id, title=self._title, fields=tuple(self._fields))
