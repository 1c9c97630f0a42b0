# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Configuration loader for the OData compliance harness.
Loads settings from the environment (and a .env file) with validation.
"""

import logging

from dotenv import load_dotenv

from .validation import HarnessConfig, load_validated_config

logger = logging.getLogger(__name__)


def load_harness_config(dotenv_path: str | None = None) -> HarnessConfig:
    """Load environment variables from .env and return the validated config."""
    # Real environment variables win over .env entries
    if load_dotenv(dotenv_path, override=False):
        logger.debug("Loaded environment overrides from .env")
    return load_validated_config()
