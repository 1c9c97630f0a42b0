# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Exception hierarchy for the compliance harness.

Configuration problems are raised before any network traffic. Everything else
is raised inside a test body and converted into an outcome at the test
boundary.
"""


class HarnessError(Exception):
    """Base class for all harness errors."""

    pass


class ConfigurationError(HarnessError):
    """Raised when configuration validation or suite registration fails."""

    pass


class TransportError(HarnessError):
    """Raised when an HTTP exchange could not complete."""

    def __init__(self, method: str, url: str, reason: str):
        self.method = method
        self.url = url
        self.reason = reason
        super().__init__(f"transport error: {method} {url}: {reason}")


class AssertionFailure(HarnessError):
    """Raised when a response does not match what a test expected."""

    pass


class TestSkipped(HarnessError):
    """Cooperative skip signal returned or raised by a test body."""

    __test__ = False

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
