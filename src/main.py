# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Main entry point for the OData compliance harness.
Loads configuration, checks the server, runs the suite catalog and reports.
"""

import logging
import sys

from harness.client import HttpClient
from harness.config import load_harness_config
from harness.errors import ConfigurationError, TransportError
from harness.reporter import ConsoleReporter, exit_code, write_markdown_report
from harness.runner import Runner
from suites import build_registry

logger = logging.getLogger(__name__)


def check_server(client: HttpClient, ready_timeout: float) -> bool:
    """Probe the service root once, or poll it until ready_timeout expires."""
    if ready_timeout <= 0:
        return client.is_reachable()
    try:
        client.wait_until_ready(ready_timeout)
    except TransportError as e:
        logger.error(f"Server did not become ready: {e}")
        return False
    return True


def main() -> int:
    try:
        config = load_harness_config()
    except ConfigurationError as e:
        print(f"💥 Configuration error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    print("🚀 OData Compliance Test Harness")
    print("=" * 50)
    print(f"📡 Target server: {config.server_url}")
    print()

    try:
        with HttpClient.from_config(config) as probe:
            if not check_server(probe, config.ready_timeout):
                print(f"❌ Server at {config.server_url} is not reachable", file=sys.stderr)
                return 1

        reporter = ConsoleReporter(verbose=config.verbose)
        runner = Runner(build_registry(), config, listener=reporter)
        run_result = runner.run_all()

        if config.report_file:
            write_markdown_report(run_result, config.report_file)

        return exit_code(run_result)

    except KeyboardInterrupt:
        print("\n⚠️  Test execution interrupted by user")
        return 130
    except ConfigurationError as e:
        print(f"\n💥 Configuration error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
