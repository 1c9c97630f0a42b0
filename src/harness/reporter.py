# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Console and markdown rendering of run results, plus the exit-code mapping.
"""

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import TextIO

from .results import Outcome, RunResult, SuiteResult, TestResult
from .runner import RunListener

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 2

_SYMBOLS = {
    Outcome.PASS: "✅ PASS",
    Outcome.FAIL: "❌ FAIL",
    Outcome.SKIP: "⏭️  SKIP",
}


def exit_code(run_result: RunResult) -> int:
    """0 when nothing failed, 1 on any failure, 2 for a cancelled run."""
    if run_result.failed:
        return EXIT_FAILED
    if run_result.cancelled:
        return EXIT_CANCELLED
    return EXIT_OK


def summary_line(run_result: RunResult) -> str:
    """Machine-readable totals for CI log scraping."""
    return (
        f"COMPLIANCE_TEST_RESULT:PASSED={run_result.passed}:FAILED={run_result.failed}"
        f":SKIPPED={run_result.skipped}:TOTAL={run_result.total}"
    )


class ConsoleReporter(RunListener):
    """Streams progress while the run executes and prints the final summary."""

    def __init__(self, verbose: bool = False, stream: TextIO | None = None):
        self.verbose = verbose
        self.stream = stream or sys.stdout
        self._lock = threading.Lock()
        self._completed = 0

    def _print(self, text: str = "") -> None:
        with self._lock:
            print(text, file=self.stream, flush=True)

    def suite_started(self, suite_result: SuiteResult) -> None:
        if self.verbose:
            self._print(f"🧪 Running test suite: {suite_result.title}")

    def test_finished(self, suite_result: SuiteResult, result: TestResult) -> None:
        if not self.verbose:
            return
        line = f"  {_SYMBOLS[result.outcome]}: {result.name}"
        if result.message:
            line += f" - {result.message}"
        self._print(line)
        for entry in result.logs:
            self._print(f"     {entry}")

    def suite_finished(self, suite_result: SuiteResult) -> None:
        if self.verbose:
            self._print(
                f"📊 {suite_result.title}: {suite_result.passed}/{suite_result.total} passed,"
                f" {suite_result.skipped} skipped\n"
            )
            return
        with self._lock:
            self._completed += 1
            status = "✅" if suite_result.success else "❌"
            print(
                f"[{self._completed}] {status} {suite_result.title} "
                f"({suite_result.passed} passed, {suite_result.failed} failed, "
                f"{suite_result.skipped} skipped)",
                file=self.stream,
                flush=True,
            )

    def run_finished(self, run_result: RunResult) -> None:
        self.print_summary(run_result)

    def print_summary(self, run_result: RunResult) -> None:
        self._print("=" * 50)
        self._print(
            f"📊 Test Results: {run_result.passed}/{run_result.total} passed, "
            f"{run_result.failed} failed, {run_result.skipped} skipped"
        )
        if run_result.duration is not None:
            self._print(f"⏱️  Duration: {run_result.duration:.2f}s")
        if run_result.cancelled:
            self._print(f"⚠️  Run cancelled: {run_result.cancel_reason}")

        failures = run_result.failures()
        if failures:
            self._print(f"❌ {len(failures)} test(s) failed")
            for result in failures:
                self._print(f"   - {result.suite} :: {result.name}: {result.message}")
        elif not run_result.cancelled:
            self._print("🎉 All tests passed!")

        self._print(summary_line(run_result))


def render_markdown(run_result: RunResult) -> str:
    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    lines = [
        "# OData Compliance Report",
        "",
        f"Generated: {generated}",
        "",
        "| Passed | Failed | Skipped | Total |",
        "|--------|--------|---------|-------|",
        f"| {run_result.passed} | {run_result.failed} | {run_result.skipped} "
        f"| {run_result.total} |",
        "",
    ]
    if run_result.cancelled:
        lines.extend([f"**Run cancelled:** {run_result.cancel_reason}", ""])

    for suite_result in run_result.suites:
        lines.append(f"## {suite_result.title}")
        lines.append("")
        if suite_result.description:
            lines.append(suite_result.description)
            lines.append("")
        if suite_result.spec_url:
            lines.append(f"Reference: {suite_result.spec_url}")
            lines.append("")
        lines.append("| Test | Outcome | Message |")
        lines.append("|------|---------|---------|")
        for result in suite_result.results:
            message = result.message.replace("|", "\\|").replace("\n", " ")
            lines.append(f"| {result.name} | {result.outcome.value} | {message} |")
        lines.append("")

        detailed = [r for r in suite_result.results if r.logs or r.details]
        for result in detailed:
            lines.append(f"<details><summary>{result.name}</summary>")
            lines.append("")
            lines.append("```")
            lines.extend(result.logs)
            if result.details:
                lines.append(json.dumps(result.details, indent=2))
            lines.append("```")
            lines.append("")
            lines.append("</details>")
            lines.append("")

    return "\n".join(lines)


def write_markdown_report(run_result: RunResult, path: str | Path) -> Path:
    report_path = Path(path)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(render_markdown(run_result), encoding="utf-8")
    logger.info(f"Markdown report written to {report_path}")
    return report_path
