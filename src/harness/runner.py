# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Suite registry and runner.

The registry is assembled explicitly at startup from an ordered catalog of
suite factories. The runner builds every selected suite before touching the
network, then executes them and aggregates one RunResult.
"""

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from .client import HttpClient
from .errors import ConfigurationError, HarnessError
from .results import FailureKind, Outcome, RunResult, SuiteResult, TestResult
from .suite import TestSuite
from .validation import VALID_VERSIONS, HarnessConfig

logger = logging.getLogger(__name__)

SuiteFactory = Callable[[], TestSuite]
ClientFactory = Callable[[HarnessConfig], HttpClient]


@dataclass(frozen=True)
class SuiteInfo:
    name: str
    version: str
    factory: SuiteFactory


class SuiteRegistry:
    """Ordered collection of suite factories keyed by (version, name)."""

    def __init__(self) -> None:
        self._suites: list[SuiteInfo] = []

    def __len__(self) -> int:
        return len(self._suites)

    def __iter__(self):
        return iter(self._suites)

    def register(self, factory: SuiteFactory, name: str, version: str = "4.0") -> None:
        if not name:
            raise ConfigurationError("Suite name cannot be empty")
        if version not in VALID_VERSIONS or version == "all":
            raise ConfigurationError(f"Invalid version {version!r} for suite {name!r}")
        if not callable(factory):
            raise ConfigurationError(f"Factory for suite {name!r} is not callable")
        for info in self._suites:
            if info.name == name and info.version == version:
                raise ConfigurationError(
                    f"Suite {name!r} is already registered for version {version}"
                )
        self._suites.append(SuiteInfo(name=name, version=version, factory=factory))

    def select(self, version: str = "all", pattern: str = "") -> list[SuiteInfo]:
        """Return suites matching the version and a substring of the suite name."""
        if version not in VALID_VERSIONS:
            raise ConfigurationError(
                f"Invalid version: {version}. Must be one of: {VALID_VERSIONS}"
            )
        return [
            info
            for info in self._suites
            if (version == "all" or info.version == version) and pattern in info.name
        ]


class RunListener:
    """Progress hooks; the default implementation ignores every event."""

    def suite_started(self, suite_result: SuiteResult) -> None:
        pass

    def test_finished(self, suite_result: SuiteResult, result: TestResult) -> None:
        pass

    def suite_finished(self, suite_result: SuiteResult) -> None:
        pass

    def run_finished(self, run_result: RunResult) -> None:
        pass

    def notify(self, event: str, *args) -> None:
        """Dispatch an event; a failing hook never affects outcomes."""
        try:
            getattr(self, event)(*args)
        except Exception as e:
            logger.error(f"Listener {type(self).__name__}.{event} failed: {e}")


class Runner:
    """Executes every selected suite and aggregates their results."""

    def __init__(
        self,
        registry: SuiteRegistry,
        config: HarnessConfig,
        client_factory: ClientFactory = HttpClient.from_config,
        listener: RunListener | None = None,
    ) -> None:
        self.registry = registry
        self.config = config
        self.client_factory = client_factory
        self.listener = listener or RunListener()
        self._cancel_event = threading.Event()
        self._cancel_reason = ""
        self._lock = threading.Lock()
        self._deadline: float | None = None

    def cancel(self, reason: str = "cancelled by user") -> None:
        """Stop the run; tests that have not started yet are recorded as skipped."""
        with self._lock:
            if not self._cancel_event.is_set():
                self._cancel_reason = reason
                self._cancel_event.set()
                logger.warning(f"Run cancelled: {reason}")

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def stop_reason(self) -> str | None:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel(f"run timeout of {self.config.run_timeout}s exceeded")
        if self._cancel_event.is_set():
            return self._cancel_reason
        return None

    def build_suites(self) -> list[tuple[SuiteInfo, TestSuite]]:
        """Construct every selected suite; any factory problem aborts the run."""
        selected = self.registry.select(self.config.version, self.config.pattern)
        if not selected:
            raise ConfigurationError(
                f"No suites match version {self.config.version!r} "
                f"and pattern {self.config.pattern!r}"
            )

        built = []
        for info in selected:
            try:
                suite = info.factory()
            except ConfigurationError:
                raise
            except Exception as e:
                raise ConfigurationError(
                    f"Failed to build suite {info.name!r}: {e}"
                ) from e
            if not isinstance(suite, TestSuite):
                raise ConfigurationError(
                    f"Factory for suite {info.name!r} returned {type(suite).__name__}"
                )
            if not suite.version:
                suite.version = info.version
            built.append((info, suite))
        return built

    def run_all(self) -> RunResult:
        """Run every selected suite; always returns a result covering every test."""
        built = self.build_suites()
        total_tests = sum(len(suite) for _, suite in built)
        logger.info(
            f"Running {len(built)} suites ({total_tests} tests) against "
            f"{self.config.server_url}"
        )

        started = time.monotonic()
        if self.config.run_timeout is not None:
            self._deadline = started + self.config.run_timeout

        if self.config.max_workers > 1 and len(built) > 1:
            suite_results = self._run_concurrently(built)
        else:
            suite_results = [self._run_suite(info, suite) for info, suite in built]

        run_result = RunResult()
        for suite_result in suite_results:
            run_result.add(suite_result)
        run_result.cancelled = self.cancelled
        run_result.cancel_reason = self._cancel_reason
        run_result.duration = time.monotonic() - started
        run_result.close()

        logger.info(
            f"Run finished: {run_result.passed} passed, {run_result.failed} failed, "
            f"{run_result.skipped} skipped in {run_result.duration:.2f}s"
        )
        self.listener.notify("run_finished", run_result)
        return run_result

    def _run_concurrently(
        self, built: list[tuple[SuiteInfo, TestSuite]]
    ) -> list[SuiteResult]:
        logger.debug(f"Running suites with {self.config.max_workers} workers")
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [
                executor.submit(self._run_suite, info, suite) for info, suite in built
            ]
            try:
                return [future.result() for future in futures]
            except KeyboardInterrupt:
                self.cancel("interrupted by user")
                return [future.result() for future in futures]

    def _run_suite(self, info: SuiteInfo, suite: TestSuite) -> SuiteResult:
        stop_reason = self.stop_reason()
        if stop_reason:
            suite_result = suite.record_all(
                Outcome.SKIP, f"run cancelled: {stop_reason}", name=info.name
            )
            self.listener.notify("suite_finished", suite_result)
            return suite_result

        try:
            with self.client_factory(self.config) as client:
                before_test = None
                scope = self.config.reseed_scope
                if scope == "test" and not suite.reseed_between_tests:
                    logger.debug(f"Suite {suite.title!r} keeps its data between tests")
                    scope = "suite"

                if scope == "suite":
                    self._reseed(client, suite.title)
                elif scope == "test":

                    def before_test() -> None:
                        self._reseed(client, suite.title)

                return suite.run(
                    self.config,
                    client=client,
                    before_test=before_test,
                    stop_check=self.stop_reason,
                    listener=self.listener,
                    name=info.name,
                    on_interrupt=self.cancel,
                )
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            logger.error(f"Suite {suite.title!r} failed outside any test: {e}")
            suite_result = suite.record_all(
                Outcome.FAIL,
                f"unexpected fault: suite {suite.title!r} could not run: "
                f"{type(e).__name__}: {e}",
                failure_kind=FailureKind.FAULT,
                name=info.name,
            )
            self.listener.notify("suite_finished", suite_result)
            return suite_result

    def _reseed(self, client: HttpClient, suite_title: str) -> None:
        try:
            client.reseed(self.config.reseed_path)
        except HarnessError as e:
            logger.warning(
                f"Reseed before {suite_title!r} failed, continuing with existing data: {e}"
            )
