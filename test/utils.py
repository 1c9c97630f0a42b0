# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Test utilities and helper functions for the compliance harness test suite.
"""

import json
import os
from typing import Any

import requests
from requests.structures import CaseInsensitiveDict

from harness.client import HTTPResponse
from harness.context import TestContext
from harness.errors import HarnessError
from harness.suite import SuiteState
from harness.validation import HarnessConfig


def _encode(body: Any) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body).encode("utf-8")


def make_response(
    status: int = 200, body: Any = None, headers: dict[str, str] | None = None
) -> HTTPResponse:
    """Create a normalized response; dict/list bodies are JSON-encoded."""
    merged = CaseInsensitiveDict(headers or {})
    if isinstance(body, dict | list) and "Content-Type" not in merged:
        merged["Content-Type"] = "application/json"
    return HTTPResponse(status_code=status, headers=merged, body=_encode(body))


def make_requests_response(
    status: int = 200, body: Any = None, headers: dict[str, str] | None = None
) -> requests.Response:
    """Create a real requests.Response for patching Session.request."""
    response = requests.Response()
    response.status_code = status
    response._content = _encode(body)
    response.headers = CaseInsensitiveDict(headers or {})
    return response


def make_config(**overrides) -> HarnessConfig:
    values = {"server_url": "http://odata.test", "reseed_scope": "none"}
    values.update(overrides)
    return HarnessConfig(**values)


class FakeClient:
    """
    In-memory stand-in for HttpClient.

    Routes map ``(method, path)`` to a response, an exception instance to
    raise, or a callable taking ``(body, headers)``. Unrouted requests get 404.
    """

    def __init__(self, routes: dict | None = None, base_url: str = "http://odata.test"):
        self.base_url = base_url
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, str, Any, dict]] = []
        self.reseeds = 0
        self.reseed_error: Exception | None = None
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.closed = True

    def request(self, method, path, body=None, headers=None) -> HTTPResponse:
        self.calls.append((method, path, body, dict(headers or {})))
        route = self.routes.get((method, path))
        if route is None:
            return make_response(404, {"error": {"message": "not found"}})
        if isinstance(route, BaseException):
            raise route
        if callable(route):
            return route(body, headers or {})
        return route

    def reseed(self, path: str = "/Reseed") -> None:
        self.reseeds += 1
        if self.reseed_error is not None:
            raise self.reseed_error

    def paths(self, method: str | None = None) -> list[str]:
        return [c[1] for c in self.calls if method is None or c[0] == method]


class FailingReseedClient(FakeClient):
    def __init__(self, routes=None):
        super().__init__(routes)
        self.reseed_error = HarnessError("Reseed returned status 500: boom")


def make_context(
    client: FakeClient | None = None,
    config: HarnessConfig | None = None,
    state: SuiteState | None = None,
) -> TestContext:
    return TestContext(
        "Example Suite",
        "test_example",
        client or FakeClient(),
        state if state is not None else SuiteState(),
        config or make_config(),
    )


class MockEnvironment:
    """Context manager for temporarily setting environment variables in tests."""

    def __init__(self, env_vars: dict[str, str]):
        self.env_vars = env_vars
        self.original_values = {}

    def __enter__(self):
        for key, value in self.env_vars.items():
            self.original_values[key] = os.environ.get(key)
            os.environ[key] = value
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        for key in self.env_vars:
            original_value = self.original_values[key]
            if original_value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = original_value
