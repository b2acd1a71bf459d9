"""
Shared HTTP client for connectors.

Every integration subclasses ConnectorClient once and funnels all of its
outbound calls through ``request``, which gives them the same behaviour:

- Auth headers are computed per request (signed tokens stay fresh)
- 2xx bodies are JSON-decoded; an empty body becomes ``{}`` and a body
  that is not JSON becomes ``{"rawResponse": <text>}``
- Non-2xx responses raise RemoteAPIError (or a status-specific subclass)
  carrying the status code and raw body
- Transport failures raise TransportError

There is no retry or backoff. A failed call surfaces to the host, which
decides whether to re-run the step.

Usage:
    class TodoistClient(ConnectorClient):
        @property
        def name(self) -> str:
            return "todoist"

        def _get_auth_headers(self) -> dict[str, str]:
            return {"Authorization": f"Bearer {self.token}"}

    async with TodoistClient(token, base_url=BASE_URL) as client:
        tasks = await client.get("/tasks")
"""

from __future__ import annotations

import json as jsonlib
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..config import ConnectorSettings, get_settings
from .errors import (
    DecodeError,
    RateLimitError,
    RemoteAPIError,
    RemoteAuthenticationError,
    RemoteNotFoundError,
    RemoteValidationError,
    TransportError,
)
from .types import JSON

logger = logging.getLogger(__name__)

RAW_RESPONSE_KEY = "rawResponse"


def decode_body(response: httpx.Response) -> JSON:
    """
    Decode a successful response body.

    Returns:
        ``{}`` for an empty body, the decoded JSON value, or
        ``{"rawResponse": text}`` if the body is not valid JSON
    """
    text = response.text
    if not text or not text.strip():
        return {}
    try:
        return jsonlib.loads(text)
    except ValueError:
        return {RAW_RESPONSE_KEY: text}


class ConnectorClient(ABC):
    """
    Abstract base class for connector HTTP clients.

    Subclasses must implement:
    - name: Integration identifier used in logs and errors
    - _get_auth_headers(): Return authentication headers
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        settings: ConnectorSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Prefix for relative request paths
            settings: Timeout, user agent and logging switches
            transport: Optional httpx transport (proxies, tests)
            headers: Extra default headers
        """
        self.base_url = base_url
        self.settings = settings or get_settings()
        self._transport = transport
        self._headers = headers or {}
        self._client: httpx.AsyncClient | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Integration identifier."""
        ...

    @abstractmethod
    def _get_auth_headers(self) -> dict[str, str]:
        """Return authentication headers for requests."""
        ...

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.settings.http_timeout,
                transport=self._transport,
                headers={
                    "Accept": "application/json",
                    "User-Agent": self.settings.user_agent,
                    **self._headers,
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> JSON:
        """
        Send one request and decode the response.

        Args:
            method: HTTP method
            path: Path relative to base_url, or an absolute URL
            params: Query parameters (None values are dropped)
            json: JSON body
            data: Form-encoded body
            headers: Additional headers

        Returns:
            Decoded response body

        Raises:
            RemoteAPIError: On a non-2xx response
            TransportError: On timeout or network failure
        """
        response = await self.send(method, path, params=params, json=json, data=data, headers=headers)
        return self._decode(response)

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request and return the checked raw response."""
        client = self._get_client()
        request_headers = {**self._get_auth_headers(), **(headers or {})}
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        if self.settings.log_requests:
            logger.debug(f"[{self.name}] {method} {path} params={params} body={json}")

        try:
            response = await client.request(
                method=method,
                url=path,
                params=params or None,
                json=json,
                data=data,
                headers=request_headers,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timeout: {e}", self.name) from e
        except httpx.TransportError as e:
            raise TransportError(f"Failed to execute request: {e}", self.name) from e

        if self.settings.log_responses:
            logger.debug(
                f"[{self.name}] Response: status={response.status_code} "
                f"body={response.text[:500] if response.text else 'empty'}"
            )

        self._check_response(response)
        return response

    def _decode(self, response: httpx.Response) -> JSON:
        return decode_body(response)

    def _error_message(self, response: httpx.Response) -> str:
        """Message used for non-2xx responses. Integrations may extract vendor fields."""
        return f"request failed with status {response.status_code}: {response.text}"

    def _check_response(self, response: httpx.Response) -> None:
        """
        Check response for errors and raise appropriate exceptions.

        Raises:
            RemoteAuthenticationError: For 401/403
            RateLimitError: For 429
            RemoteNotFoundError: For 404
            RemoteValidationError: For 400/422
            RemoteAPIError: For other non-2xx statuses
        """
        if response.is_success:
            return

        status = response.status_code
        body = response.text
        message = self._error_message(response)
        logger.warning(f"[{self.name}] {response.request.method} {response.request.url.path} -> {status}")

        if status in (401, 403):
            raise RemoteAuthenticationError(message, self.name, status_code=status, response_body=body)

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            try:
                retry_seconds = float(retry_after) if retry_after else None
            except ValueError:
                retry_seconds = None
            raise RateLimitError(
                message,
                self.name,
                status_code=status,
                response_body=body,
                retry_after=retry_seconds,
            )

        if status == 404:
            raise RemoteNotFoundError(message, self.name, status_code=status, response_body=body)

        if status in (400, 422):
            raise RemoteValidationError(message, self.name, status_code=status, response_body=body)

        raise RemoteAPIError(message, self.name, status_code=status, response_body=body)

    # Convenience verbs

    async def get(self, path: str, *, params: dict[str, Any] | None = None, **kwargs: Any) -> JSON:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, *, json: Any = None, **kwargs: Any) -> JSON:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, *, json: Any = None, **kwargs: Any) -> JSON:
        return await self.request("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, *, json: Any = None, **kwargs: Any) -> JSON:
        return await self.request("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> JSON:
        return await self.request("DELETE", path, **kwargs)

    def expect_object(self, value: JSON, what: str) -> dict[str, Any]:
        """Return ``value`` if it is a JSON object, else raise DecodeError."""
        if not isinstance(value, dict):
            raise DecodeError(f"unexpected {what} response: expected an object", self.name)
        return value

    def expect_list(self, value: JSON, what: str) -> list[Any]:
        if not isinstance(value, list):
            raise DecodeError(f"unexpected {what} response: expected an array", self.name)
        return value

    async def __aenter__(self) -> ConnectorClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

