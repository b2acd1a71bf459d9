"""
Exceptions raised by connectors.

Every failure a connector can surface to the host derives from
ConnectorError so the host can render one message per failed step:

    ConnectorError
    ├── InputValidationError   bad or missing step input (no HTTP call made)
    ├── AuthError              missing credential in the auth context
    ├── TransportError         timeout, DNS or connection failure
    ├── DecodeError            response had an unexpected shape
    └── RemoteAPIError         non-2xx status from the remote API
        ├── RemoteAuthenticationError  (401/403)
        ├── RemoteNotFoundError        (404)
        ├── RateLimitError             (429)
        └── RemoteValidationError      (400/422)
"""

from __future__ import annotations

from typing import Any


class ConnectorError(Exception):
    """Base exception for connector errors."""

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.integration = integration
        self.status_code = status_code
        self.response_body = response_body

    @property
    def message(self) -> str:
        return self.args[0]

    def __str__(self) -> str:
        parts = [f"[{self.integration}] {self.args[0]}"]
        if self.status_code:
            parts.append(f"(status={self.status_code})")
        return " ".join(parts)


class InputValidationError(ConnectorError):
    """Raised when step input is missing, blank or cannot be converted."""

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(message, integration)
        self.errors = errors or []


class AuthError(ConnectorError):
    """Raised when the auth context lacks a required credential."""


class TransportError(ConnectorError):
    """Raised when the request never produced an HTTP response."""


class DecodeError(ConnectorError):
    """Raised when a response cannot be reshaped into the documented output."""


class RemoteAPIError(ConnectorError):
    """Raised for any non-2xx response."""

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        status_code: int,
        response_body: str | None = None,
    ):
        super().__init__(
            message,
            integration,
            status_code=status_code,
            response_body=response_body,
        )


class RemoteAuthenticationError(RemoteAPIError):
    """Raised when the remote API rejects the credentials (401/403)."""


class RemoteNotFoundError(RemoteAPIError):
    """Raised when a resource is not found (404)."""


class RateLimitError(RemoteAPIError):
    """Raised when rate limit is exceeded (429)."""

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        retry_after: float | None = None,
        **kwargs,
    ):
        super().__init__(message, integration, **kwargs)
        self.retry_after = retry_after


class RemoteValidationError(RemoteAPIError):
    """Raised when the remote API rejects the request payload (400/422)."""
