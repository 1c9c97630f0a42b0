# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Test configuration and fixtures for the compliance harness test suite.
"""

import os
import sys
from pathlib import Path

import pytest

# Add src directory to Python path for imports
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from utils import FakeClient, make_config, make_response  # noqa: E402

# Keep the developer's environment out of config tests
for key in [k for k in os.environ if k.startswith("COMPLIANCE_")]:
    os.environ.pop(key)
os.environ["COMPLIANCE_LOG_LEVEL"] = "WARNING"


@pytest.fixture
def config():
    """Provide a harness configuration that never reseeds."""
    return make_config()


@pytest.fixture
def fake_client():
    """Provide an in-memory client with a minimal OData service."""
    return FakeClient(
        {
            ("GET", "/"): make_response(
                200,
                {"@odata.context": "$metadata", "value": [{"name": "Products"}]},
                {"OData-Version": "4.0"},
            ),
            ("GET", "/Products?$top=1&$select=ID"): make_response(
                200, {"value": [{"ID": 1}]}
            ),
        }
    )


@pytest.fixture
def products():
    """Provide sample product entities."""
    return [
        {"ID": 1, "Name": "Laptop", "Price": 999.99, "CategoryID": 1, "Status": 1},
        {"ID": 2, "Name": "Wireless Mouse", "Price": 29.99, "CategoryID": 1, "Status": 1},
        {"ID": 3, "Name": "Monitor", "Price": 150, "CategoryID": 2, "Status": 1},
    ]
