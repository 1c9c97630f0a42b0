# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Test suites: ordered, named collections of test cases for one protocol section.

Tests in a suite run strictly in registration order on a single thread, each
with a fresh TestContext. Suite-scoped state lives in a SuiteState that is
recreated for every run.
"""

import logging
import time
import traceback
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .client import HttpClient
from .context import TestContext
from .errors import AssertionFailure, ConfigurationError, TestSkipped, TransportError
from .results import FailureKind, Outcome, SuiteResult, TestResult
from .validation import HarnessConfig

if TYPE_CHECKING:
    from .runner import RunListener

logger = logging.getLogger(__name__)

TestFunction = Callable[[TestContext], Any]

# Returns a cancellation reason, or None to keep going
StopCheck = Callable[[], str | None]


@dataclass(frozen=True)
class TestCase:
    """A named, described unit of work executed against the server."""

    __test__ = False

    name: str
    description: str
    fn: TestFunction


class SuiteState:
    """Mutable values shared by the tests of one suite, in registration order."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def pop(self, key: str, default: Any = None) -> Any:
        return self._values.pop(key, default)

    def require(self, key: str) -> Any:
        """Return a value recorded by an earlier test, or skip the current one."""
        if key not in self._values:
            raise TestSkipped(f"prerequisite {key!r} was not recorded by an earlier test")
        return self._values[key]


def classify(
    suite_title: str, case: TestCase, returned: Any, error: BaseException | None
) -> TestResult:
    """Turn what a test body returned or raised into exactly one TestResult."""
    signal = error if error is not None else returned
    result = TestResult(
        suite=suite_title,
        name=case.name,
        description=case.description,
        outcome=Outcome.PASS,
    )

    if signal is None:
        return result

    if isinstance(signal, TestSkipped):
        result.outcome = Outcome.SKIP
        result.message = signal.reason
    elif isinstance(signal, AssertionFailure):
        result.outcome = Outcome.FAIL
        result.failure_kind = FailureKind.ASSERTION
        result.message = str(signal)
    elif isinstance(signal, TransportError):
        result.outcome = Outcome.FAIL
        result.failure_kind = FailureKind.TRANSPORT
        result.message = str(signal)
    elif isinstance(signal, BaseException):
        result.outcome = Outcome.FAIL
        result.failure_kind = FailureKind.FAULT
        result.message = f"unexpected fault: {type(signal).__name__}: {signal}"
        result.details = {
            "traceback": "".join(
                traceback.format_exception(type(signal), signal, signal.__traceback__)
            )
        }
    else:
        result.outcome = Outcome.FAIL
        result.failure_kind = FailureKind.FAULT
        result.message = (
            f"unexpected fault: test returned {type(signal).__name__} instead of None"
        )

    return result


class TestSuite:
    """Collection of test cases with ordered execution."""

    __test__ = False

    def __init__(
        self,
        title: str,
        description: str = "",
        spec_url: str = "",
        version: str = "",
        reseed_between_tests: bool = True,
    ) -> None:
        if not title or not title.strip():
            raise ConfigurationError("Suite title cannot be empty")
        self.title = title
        self.description = description
        self.spec_url = spec_url
        self.version = version
        # False when suite state refers to server data that a reseed would discard
        self.reseed_between_tests = reseed_between_tests
        self._tests: list[TestCase] = []
        self._names: set[str] = set()

    @property
    def tests(self) -> tuple[TestCase, ...]:
        return tuple(self._tests)

    def __len__(self) -> int:
        return len(self._tests)

    def add_test(self, name: str, description: str, fn: TestFunction) -> "TestSuite":
        """Append a test case; duplicate names are a configuration error."""
        if not name or not name.strip():
            raise ConfigurationError(f"Test name cannot be empty in suite {self.title!r}")
        if name in self._names:
            raise ConfigurationError(
                f"Duplicate test name {name!r} in suite {self.title!r}"
            )
        if not callable(fn):
            raise ConfigurationError(f"Test {name!r} in suite {self.title!r} is not callable")
        self._tests.append(TestCase(name=name, description=description, fn=fn))
        self._names.add(name)
        return self

    def test(self, name: str, description: str) -> Callable[[TestFunction], TestFunction]:
        """Decorator form of add_test."""

        def decorator(fn: TestFunction) -> TestFunction:
            self.add_test(name, description, fn)
            return fn

        return decorator

    def new_result(self, name: str = "") -> SuiteResult:
        return SuiteResult(
            title=self.title,
            name=name,
            version=self.version,
            description=self.description,
            spec_url=self.spec_url,
        )

    def record_all(
        self,
        outcome: Outcome,
        message: str,
        failure_kind: FailureKind | None = None,
        name: str = "",
    ) -> SuiteResult:
        """Record the same outcome for every test without executing anything."""
        suite_result = self.new_result(name)
        for case in self._tests:
            suite_result.append(
                TestResult(
                    suite=self.title,
                    name=case.name,
                    description=case.description,
                    outcome=outcome,
                    message=message,
                    failure_kind=failure_kind,
                )
            )
        suite_result.close()
        return suite_result

    def run(
        self,
        config: HarnessConfig,
        client: HttpClient | None = None,
        before_test: Callable[[], None] | None = None,
        stop_check: StopCheck | None = None,
        listener: "RunListener | None" = None,
        name: str = "",
        on_interrupt: Callable[[str], None] | None = None,
    ) -> SuiteResult:
        """
        Run all test cases in registration order and return their outcomes.

        Every registered test gets exactly one result. Once ``stop_check``
        reports a reason (or a test body is interrupted with Ctrl-C) the
        remaining tests are recorded as skipped instead of being executed.
        """
        owns_client = client is None
        if client is None:
            client = HttpClient.from_config(config)

        state = SuiteState()
        suite_result = self.new_result(name)
        started = time.monotonic()
        interrupted: str | None = None
        logger.info(f"Running suite {self.title!r} ({len(self._tests)} tests)")
        if listener is not None:
            listener.notify("suite_started", suite_result)

        try:
            for case in self._tests:
                stop_reason = interrupted or (stop_check() if stop_check else None)
                if stop_reason:
                    result = self._cancelled(case, stop_reason)
                else:
                    try:
                        if before_test is not None:
                            before_test()
                        result = self._execute(case, client, state, config)
                    except KeyboardInterrupt:
                        interrupted = "interrupted by user"
                        logger.warning(
                            f"Interrupted during {self.title} :: {case.name}"
                        )
                        if on_interrupt is not None:
                            on_interrupt(interrupted)
                        result = self._cancelled(case, interrupted)

                suite_result.append(result)
                logger.debug(f"{result.outcome.value}: {self.title} :: {case.name}")
                if listener is not None:
                    listener.notify("test_finished", suite_result, result)
        finally:
            if owns_client:
                client.close()

        suite_result.duration = time.monotonic() - started
        suite_result.close()
        logger.info(
            f"Suite {self.title!r} finished: {suite_result.passed} passed, "
            f"{suite_result.failed} failed, {suite_result.skipped} skipped"
        )
        if listener is not None:
            listener.notify("suite_finished", suite_result)
        return suite_result

    def _cancelled(self, case: TestCase, reason: str) -> TestResult:
        return TestResult(
            suite=self.title,
            name=case.name,
            description=case.description,
            outcome=Outcome.SKIP,
            message=f"run cancelled: {reason}",
        )

    def _execute(
        self,
        case: TestCase,
        client: HttpClient,
        state: SuiteState,
        config: HarnessConfig,
    ) -> TestResult:
        ctx = TestContext(self.title, case.name, client, state, config)
        returned: Any = None
        error: BaseException | None = None
        started = time.monotonic()

        try:
            returned = case.fn(ctx)
        except KeyboardInterrupt:
            raise
        # SystemExit and friends from a test body must not take down the run
        except BaseException as e:
            error = e
            if not isinstance(e, AssertionFailure | TransportError | TestSkipped):
                logger.error(
                    f"Test {self.title} :: {case.name} raised {type(e).__name__}: {e}"
                )

        result = classify(self.title, case, returned, error)
        result.logs = list(ctx.logs)
        result.duration = time.monotonic() - started
        return result
