# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
OData conformance test harness engine.
Exposes the public surface used by suites and the entry point.
"""

from .client import HTTPResponse, HttpClient  # noqa: F401
from .context import TestContext  # noqa: F401
from .errors import (  # noqa: F401
    AssertionFailure,
    ConfigurationError,
    HarnessError,
    TestSkipped,
    TransportError,
)
from .results import FailureKind, Outcome, RunResult, SuiteResult, TestResult  # noqa: F401
from .runner import RunListener, Runner, SuiteRegistry  # noqa: F401
from .suite import SuiteState, TestCase, TestSuite  # noqa: F401
from .validation import HarnessConfig  # noqa: F401
