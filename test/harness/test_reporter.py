# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

import io

from harness.reporter import (
    EXIT_CANCELLED,
    EXIT_FAILED,
    EXIT_OK,
    ConsoleReporter,
    exit_code,
    summary_line,
    write_markdown_report,
)
from harness.results import FailureKind, Outcome, RunResult, SuiteResult, TestResult


def build_run(*outcomes, cancelled=False):
    suite = SuiteResult(title="2.1 Conformance", spec_url="https://example.com/#sec")
    for i, outcome in enumerate(outcomes):
        suite.append(
            TestResult(
                suite=suite.title,
                name=f"test_{i}",
                description="",
                outcome=outcome,
                message="expected status 200, got 404" if outcome is Outcome.FAIL else "",
                failure_kind=FailureKind.ASSERTION if outcome is Outcome.FAIL else None,
                logs=["note"] if outcome is Outcome.PASS else [],
            )
        )
    run = RunResult(cancelled=cancelled, cancel_reason="interrupted" if cancelled else "")
    run.add(suite)
    run.duration = 1.5
    run.close()
    return run


def test_exit_code():
    assert exit_code(build_run(Outcome.PASS, Outcome.SKIP)) == EXIT_OK
    assert exit_code(build_run(Outcome.PASS, Outcome.FAIL)) == EXIT_FAILED
    assert exit_code(build_run(Outcome.PASS, Outcome.SKIP, cancelled=True)) == EXIT_CANCELLED
    assert exit_code(build_run(Outcome.FAIL, cancelled=True)) == EXIT_FAILED


def test_summary_line():
    run = build_run(Outcome.PASS, Outcome.FAIL, Outcome.SKIP, Outcome.PASS)
    assert summary_line(run) == "COMPLIANCE_TEST_RESULT:PASSED=2:FAILED=1:SKIPPED=1:TOTAL=4"


def test_console_summary_lists_failures():
    stream = io.StringIO()
    reporter = ConsoleReporter(stream=stream)

    reporter.run_finished(build_run(Outcome.PASS, Outcome.FAIL))

    output = stream.getvalue()
    assert "1 test(s) failed" in output
    assert "2.1 Conformance :: test_1: expected status 200, got 404" in output
    assert output.rstrip().endswith("COMPLIANCE_TEST_RESULT:PASSED=1:FAILED=1:SKIPPED=0:TOTAL=2")


def test_console_summary_all_passed():
    stream = io.StringIO()
    ConsoleReporter(stream=stream).print_summary(build_run(Outcome.PASS))
    assert "All tests passed" in stream.getvalue()


def test_console_summary_cancelled():
    stream = io.StringIO()
    ConsoleReporter(stream=stream).print_summary(build_run(Outcome.SKIP, cancelled=True))
    output = stream.getvalue()
    assert "Run cancelled: interrupted" in output
    assert "All tests passed" not in output


def test_verbose_progress():
    stream = io.StringIO()
    reporter = ConsoleReporter(verbose=True, stream=stream)
    run = build_run(Outcome.PASS, Outcome.SKIP)
    suite = run.suites[0]

    reporter.suite_started(suite)
    for result in suite.results:
        reporter.test_finished(suite, result)
    reporter.suite_finished(suite)

    output = stream.getvalue()
    assert "Running test suite: 2.1 Conformance" in output
    assert "PASS: test_0" in output
    assert "SKIP: test_1" in output
    assert "     note" in output


def test_quiet_progress_prints_one_line_per_suite():
    stream = io.StringIO()
    reporter = ConsoleReporter(stream=stream)
    suite = build_run(Outcome.PASS, Outcome.FAIL).suites[0]

    reporter.test_finished(suite, suite.results[0])
    reporter.suite_finished(suite)

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    assert "2.1 Conformance (1 passed, 1 failed, 0 skipped)" in lines[0]


def test_markdown_report(tmp_path):
    run = build_run(Outcome.PASS, Outcome.FAIL, Outcome.SKIP)
    report = write_markdown_report(run, tmp_path / "reports" / "compliance.md")

    content = report.read_text(encoding="utf-8")
    assert content.startswith("# OData Compliance Report")
    assert "| 1 | 1 | 1 | 3 |" in content
    assert "## 2.1 Conformance" in content
    assert "| test_1 | FAIL | expected status 200, got 404 |" in content
    assert "Reference: https://example.com/#sec" in content
    assert "<details><summary>test_0</summary>" in content
