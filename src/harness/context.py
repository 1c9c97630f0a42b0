# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Per-test execution context.

A TestContext is created for exactly one test execution and discarded
afterwards. It issues requests through the suite's HttpClient, wraps the
assertion library, and collects log lines for the report.
"""

import logging
from typing import TYPE_CHECKING, Any

from . import assertions
from .client import HTTPResponse, HttpClient
from .errors import AssertionFailure, TestSkipped
from .validation import HarnessConfig

if TYPE_CHECKING:
    from .suite import SuiteState

logger = logging.getLogger(__name__)


class TestContext:
    """Everything a test body needs to drive and judge HTTP interactions."""

    __test__ = False

    def __init__(
        self,
        suite_title: str,
        test_name: str,
        client: HttpClient,
        state: "SuiteState",
        config: HarnessConfig,
    ) -> None:
        self.suite_title = suite_title
        self.test_name = test_name
        self.client = client
        self.state = state
        self.config = config
        self.logs: list[str] = []

    @property
    def server_url(self) -> str:
        return self.client.base_url

    # HTTP verbs

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> HTTPResponse:
        return self.client.request(method, path, body=body, headers=headers)

    def get(self, path: str, headers: dict[str, str] | None = None) -> HTTPResponse:
        return self.request("GET", path, headers=headers)

    def head(self, path: str, headers: dict[str, str] | None = None) -> HTTPResponse:
        return self.request("HEAD", path, headers=headers)

    def post(
        self, path: str, body: Any = None, headers: dict[str, str] | None = None
    ) -> HTTPResponse:
        return self.request("POST", path, body=body, headers=headers)

    def put(
        self, path: str, body: Any = None, headers: dict[str, str] | None = None
    ) -> HTTPResponse:
        return self.request("PUT", path, body=body, headers=headers)

    def patch(
        self, path: str, body: Any = None, headers: dict[str, str] | None = None
    ) -> HTTPResponse:
        return self.request("PATCH", path, body=body, headers=headers)

    def delete(self, path: str, headers: dict[str, str] | None = None) -> HTTPResponse:
        return self.request("DELETE", path, headers=headers)

    def post_raw(
        self,
        path: str,
        body: bytes,
        content_type: str,
        headers: dict[str, str] | None = None,
    ) -> HTTPResponse:
        return self.request(
            "POST", path, body=body, headers={"Content-Type": content_type, **(headers or {})}
        )

    def put_raw(
        self,
        path: str,
        body: bytes,
        content_type: str,
        headers: dict[str, str] | None = None,
    ) -> HTTPResponse:
        return self.request(
            "PUT", path, body=body, headers={"Content-Type": content_type, **(headers or {})}
        )

    # Assertions

    @staticmethod
    def _raise_if(failure: AssertionFailure | None) -> None:
        if failure is not None:
            raise failure

    def assert_status_code(self, resp: HTTPResponse, expected: int) -> None:
        self._raise_if(assertions.check_status_code(resp, expected))

    def assert_status_in(self, resp: HTTPResponse, *expected: int) -> None:
        self._raise_if(assertions.check_status_in(resp, *expected))

    def assert_header(self, resp: HTTPResponse, name: str, expected: str) -> None:
        self._raise_if(assertions.check_header(resp, name, expected))

    def assert_header_contains(
        self, resp: HTTPResponse, name: str, substring: str
    ) -> None:
        self._raise_if(assertions.check_header_contains(resp, name, substring))

    def assert_body_contains(self, resp: HTTPResponse, substring: str) -> None:
        self._raise_if(assertions.check_body_contains(resp, substring))

    def assert_json_field(self, resp: HTTPResponse, path: str) -> None:
        self._raise_if(assertions.check_json_field(resp, path))

    def get_json(self, resp: HTTPResponse) -> Any:
        return assertions.decode_json(resp)

    def is_valid_json(self, resp: HTTPResponse) -> bool:
        return assertions.check_valid_json(resp) is None

    # Outcome signals

    def fail(self, message: str) -> AssertionFailure:
        """Build a failure for ``raise ctx.fail(...)``."""
        return AssertionFailure(message)

    def skip(self, reason: str) -> TestSkipped:
        """Build the skip signal; a test may either return or raise it."""
        return TestSkipped(reason)

    def accept_optional(
        self, resp: HTTPResponse, *unsupported: int, feature: str
    ) -> bool:
        """
        Classify a response to a request exercising an optional feature.

        Returns True when the server implemented the feature (2xx). When the
        status is one of ``unsupported`` the server declined the feature:
        strict runs skip the test, lenient runs log it and let the test pass
        (the caller should return without further checks on False). Any
        other status is a failure.
        """
        if 200 <= resp.status_code < 300:
            return True
        if resp.status_code in unsupported:
            message = f"{feature} not supported (status {resp.status_code})"
            if self.config.strict:
                raise self.skip(message)
            self.log(message)
            return False
        allowed = ", ".join(str(code) for code in (200, *unsupported))
        raise self.fail(
            f"expected status {allowed} for {feature}, got {resp.status_code}"
        )

    def log(self, message: str) -> None:
        self.logs.append(message)
        logger.debug(f"[{self.suite_title} :: {self.test_name}] {message}")
