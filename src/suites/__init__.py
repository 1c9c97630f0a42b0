# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Catalog of conformance suites, in execution order.
"""

from harness.runner import SuiteFactory, SuiteRegistry

from . import v4_0, v4_01

CATALOG: list[tuple[str, str, SuiteFactory]] = [
    ("2.1_conformance", "4.0", v4_0.conformance),
    ("8.2.2_header_if_match", "4.0", v4_0.header_if_match),
    ("11.2.5.1_query_filter", "4.0", v4_0.query_filter),
    ("11.4.3_update_entity", "4.0", v4_0.update_entity),
    ("11.2.5.8_query_compute", "4.01", v4_01.query_compute),
]


def build_registry() -> SuiteRegistry:
    registry = SuiteRegistry()
    for name, version, factory in CATALOG:
        registry.register(factory, name, version)
    return registry
