# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
OData 4.01 conformance suites.
"""

from .query_compute import query_compute  # noqa: F401
