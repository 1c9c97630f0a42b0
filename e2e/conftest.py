#!/usr/bin/env python3
# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Pytest configuration and fixtures for e2e tests.

These tests run the suite catalog against a live OData service, typically a
reference server started locally. The target comes from COMPLIANCE_SERVER_URL.
"""

import os
import sys
from pathlib import Path

import pytest
import requests

# Add the source tree to Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

DEFAULT_SERVER_URL = "http://localhost:9090"


def server_url() -> str:
    return os.environ.get("COMPLIANCE_SERVER_URL", DEFAULT_SERVER_URL).rstrip("/")


@pytest.fixture(scope="session")
def e2e_config():
    """Harness configuration for the live server, reseeding before each suite."""
    from harness.validation import HarnessConfig

    return HarnessConfig(
        server_url=server_url(),
        reseed_scope=os.environ.get("COMPLIANCE_RESEED_SCOPE", "suite"),
        strict=os.environ.get("COMPLIANCE_STRICT", "true").lower() in ("true", "1", "yes", "on"),
        log_level="WARNING",
    )


# Pytest markers for e2e tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "e2e: End-to-end tests against a live OData service")
    config.addinivalue_line("markers", "slow: Slow-running tests that may take longer")


def pytest_collection_modifyitems(config, items):
    """Automatically mark e2e tests based on their location."""
    e2e_path = Path(__file__).parent

    for item in items:
        if e2e_path in Path(item.fspath).parents:
            item.add_marker(pytest.mark.e2e)


def pytest_sessionstart(session):
    """Ensure the OData service is responding before running e2e tests."""
    url = server_url()
    print(f"\nStarting e2e tests against OData service at {url}")

    try:
        print("Checking service health...")
        response = requests.get(f"{url}/", timeout=10)
        if response.status_code != 200:
            pytest.exit(
                f"❌ OData service not responding correctly at {url}\n"
                f"   Status code: {response.status_code}"
            )
        print("✅ OData service is responding correctly")
    except requests.exceptions.ConnectionError:
        pytest.exit(
            f"❌ Cannot connect to OData service at {url}\n"
            f"   Start the reference server or set COMPLIANCE_SERVER_URL"
        )
    except requests.exceptions.Timeout:
        pytest.exit(
            f"❌ OData service timeout at {url}\n"
            f"   The service may be starting up. Wait and try again."
        )


def pytest_sessionfinish(session, exitstatus):
    """Report the overall e2e outcome."""
    if exitstatus == 0:
        print("\nAll e2e tests passed!")
    else:
        print(f"\nSome e2e tests failed (exit code: {exitstatus})")
