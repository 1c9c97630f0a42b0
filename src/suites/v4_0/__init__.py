# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
OData 4.0 conformance suites.
"""

from .conformance import conformance  # noqa: F401
from .header_if_match import header_if_match  # noqa: F401
from .query_filter import query_filter  # noqa: F401
from .update_entity import update_entity  # noqa: F401
