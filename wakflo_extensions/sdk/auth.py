"""
Authentication primitives.

AuthSchema describes what an integration needs from the host (an OAuth2
connection or a set of custom credential fields). AuthContext is what the
host hands back on every invocation: the resolved access token plus any
extra key/value credentials such as ``domain`` or ``api-key``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import AuthError

if TYPE_CHECKING:
    from .forms import FormSchema


class AuthStrategy(Enum):
    """How the host obtains credentials for an integration."""

    NONE = "none"
    OAUTH2 = "oauth2"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class AuthSchema:
    """Auth requirements declared by an integration, action or trigger."""

    strategy: AuthStrategy = AuthStrategy.NONE
    required: bool = False
    description: str = ""

    # OAuth2
    authorization_url: str | None = None
    token_url: str | None = None
    scopes: tuple[str, ...] = ()
    exclude_scopes_from_url: bool = False

    # Custom credential form
    fields: FormSchema | None = None

    @classmethod
    def none(cls) -> AuthSchema:
        return cls()

    @classmethod
    def oauth2(
        cls,
        *,
        authorization_url: str,
        token_url: str,
        scopes: list[str] | tuple[str, ...] = (),
        description: str = "",
        exclude_scopes_from_url: bool = False,
    ) -> AuthSchema:
        return cls(
            strategy=AuthStrategy.OAUTH2,
            required=True,
            description=description,
            authorization_url=authorization_url,
            token_url=token_url,
            scopes=tuple(scopes),
            exclude_scopes_from_url=exclude_scopes_from_url,
        )

    @classmethod
    def custom(cls, fields: FormSchema, *, description: str = "") -> AuthSchema:
        return cls(
            strategy=AuthStrategy.CUSTOM,
            required=True,
            description=description,
            fields=fields,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "strategy": self.strategy.value,
            "required": self.required,
        }
        if self.description:
            result["description"] = self.description
        if self.strategy is AuthStrategy.OAUTH2:
            result["authUrl"] = self.authorization_url
            result["tokenUrl"] = self.token_url
            result["scopes"] = list(self.scopes)
            result["excludeScopesFromUrl"] = self.exclude_scopes_from_url
        if self.fields is not None:
            result["fields"] = self.fields.to_json_schema()
        return result


@dataclass(frozen=True)
class AuthContext:
    """
    Credentials resolved by the host for a single invocation.

    Read-only to connectors. Custom-auth integrations keep their values in
    ``extra`` (e.g. ``{"domain": "acme", "api-key": "..."}``); OAuth2
    integrations use ``access_token``.
    """

    access_token: str | None = None
    extra: dict[str, str] = field(default_factory=dict)

    @property
    def token(self) -> str | None:
        return self.access_token

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get an extra credential value."""
        value = self.extra.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        return value

    def require(self, key: str, integration: str, label: str | None = None) -> str:
        """
        Get an extra credential value, raising if it is missing or blank.

        Raises:
            AuthError: If the value is not configured
        """
        value = self.get(key)
        if value is None:
            raise AuthError(f"{label or key} is required", integration)
        return value.strip()

    def require_token(self, integration: str) -> str:
        """
        Get the access token, raising if it is missing.

        Raises:
            AuthError: If no token is present
        """
        if not self.access_token or not self.access_token.strip():
            raise AuthError("access token is required", integration)
        return self.access_token.strip()
