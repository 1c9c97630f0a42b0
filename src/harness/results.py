# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Result model: one outcome per test, aggregated per suite and per run.

Suite and run results are append-only while the run is in progress and
become read-only once closed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Outcome(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    SKIP = "SKIP"


class FailureKind(str, Enum):
    ASSERTION = "assertion"
    TRANSPORT = "transport"
    FAULT = "fault"


@dataclass
class TestResult:
    """Result of a single test case execution."""

    __test__ = False

    suite: str
    name: str
    description: str
    outcome: Outcome
    message: str = ""
    failure_kind: FailureKind | None = None
    logs: list[str] = field(default_factory=list)
    details: dict[str, Any] | None = None
    duration: float | None = None

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASS

    @property
    def failed(self) -> bool:
        return self.outcome is Outcome.FAIL

    @property
    def skipped(self) -> bool:
        return self.outcome is Outcome.SKIP


@dataclass
class SuiteResult:
    """Outcomes of every test registered in one suite, in execution order."""

    title: str
    name: str = ""
    version: str = ""
    description: str = ""
    spec_url: str = ""
    results: list[TestResult] = field(default_factory=list)
    duration: float | None = None
    _closed: bool = field(default=False, repr=False)

    def append(self, result: TestResult) -> None:
        if self._closed:
            raise RuntimeError(f"Suite result for {self.title!r} is closed")
        self.results.append(result)

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.outcome is Outcome.PASS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.outcome is Outcome.FAIL)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.outcome is Outcome.SKIP)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def outcomes(self) -> list[Outcome]:
        return [r.outcome for r in self.results]

    def get(self, test_name: str) -> TestResult | None:
        for result in self.results:
            if result.name == test_name:
                return result
        return None


@dataclass
class RunResult:
    """Aggregate of every suite result produced by one run."""

    suites: list[SuiteResult] = field(default_factory=list)
    cancelled: bool = False
    cancel_reason: str = ""
    duration: float | None = None
    _closed: bool = field(default=False, repr=False)

    def add(self, suite_result: SuiteResult) -> None:
        if self._closed:
            raise RuntimeError("Run result is closed")
        self.suites.append(suite_result)

    def close(self) -> None:
        for suite_result in self.suites:
            suite_result.close()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def total(self) -> int:
        return sum(s.total for s in self.suites)

    @property
    def passed(self) -> int:
        return sum(s.passed for s in self.suites)

    @property
    def failed(self) -> int:
        return sum(s.failed for s in self.suites)

    @property
    def skipped(self) -> int:
        return sum(s.skipped for s in self.suites)

    @property
    def success(self) -> bool:
        return self.failed == 0 and not self.cancelled

    def outcomes(self) -> dict[tuple[str, str], TestResult]:
        """Map (suite title, test name) to the recorded result."""
        return {(s.title, r.name): r for s in self.suites for r in s.results}

    def failures(self) -> list[TestResult]:
        return [r for s in self.suites for r in s.results if r.failed]
