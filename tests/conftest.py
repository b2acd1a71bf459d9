"""
Pytest configuration and fixtures for connector tests.
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

# Add the repository root to path for imports
# This allows `from wakflo_extensions.sdk import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from wakflo_extensions.sdk import AuthContext, ExecuteContext, PerformContext  # noqa: E402


class MockAPI:
    """
    Routes requests to canned responses and records what was sent.

    Routes are keyed by (method, path). A route value is either a JSON
    body (served with status 200), an httpx.Response, or a callable
    taking the request and returning one of those. Unmatched requests
    get a 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def add(self, method: str, path: str, response: Any) -> "MockAPI":
        self.routes[(method.upper(), path)] = response
        return self

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        """Decoded JSON body of a recorded request."""
        return json.loads(self.requests[index].content)


@pytest.fixture
def api():
    """Mock remote API."""
    return MockAPI()


@pytest.fixture
def perform_ctx(api) -> Callable[..., PerformContext]:
    """Build a PerformContext wired to the mock API."""

    def factory(input: dict | None = None, token: str | None = "test-token", **extra: str):
        return PerformContext(
            input=input or {},
            auth=AuthContext(access_token=token, extra=extra),
            transport=api.transport,
        )

    return factory


@pytest.fixture
def execute_ctx(api) -> Callable[..., ExecuteContext]:
    """Build an ExecuteContext wired to the mock API."""

    def factory(
        input: dict | None = None,
        metadata: dict | None = None,
        token: str | None = "test-token",
        **extra: str,
    ):
        return ExecuteContext(
            input=input or {},
            auth=AuthContext(access_token=token, extra=extra),
            metadata=metadata if metadata is not None else {},
            transport=api.transport,
        )

    return factory
