# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Configuration validation module for the OData compliance harness.
Provides schema validation and error handling for environment variables.
"""

import json
import logging
import math
import os
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import urlparse

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ReseedScope = Literal["none", "suite", "test"]
VALID_RESEED_SCOPES = ["none", "suite", "test"]
VALID_VERSIONS = ["all", "4.0", "4.01"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class HarnessConfig:
    """Complete configuration for one compliance run."""

    server_url: str = "http://localhost:9090"
    default_headers: dict[str, str] = field(default_factory=dict)
    request_timeout: float = 30.0
    run_timeout: float | None = None
    reseed_path: str = "/Reseed"
    reseed_scope: ReseedScope = "suite"
    version: str = "all"
    pattern: str = ""
    strict: bool = True
    max_workers: int = 1
    ready_timeout: float = 0.0
    verbose: bool = False
    debug: bool = False
    report_file: str | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate the configuration after initialization."""
        parsed = urlparse(self.server_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(
                f"Server URL must be an absolute http(s) URL, got: {self.server_url!r}"
            )
        self.server_url = self.server_url.rstrip("/")

        if not math.isfinite(self.request_timeout) or self.request_timeout <= 0:
            raise ValueError(
                f"Request timeout must be positive and finite, got: {self.request_timeout}"
            )

        if self.run_timeout is not None and not 0 < self.run_timeout < math.inf:
            raise ValueError(
                f"Run timeout must be positive and finite, got: {self.run_timeout}"
            )

        if not 0 <= self.ready_timeout < math.inf:
            raise ValueError(
                f"Ready timeout must be finite and not negative, got: {self.ready_timeout}"
            )

        if not self.reseed_path.startswith("/"):
            raise ValueError(f"Reseed path must start with '/', got: {self.reseed_path}")

        if self.reseed_scope not in VALID_RESEED_SCOPES:
            raise ValueError(
                f"Invalid reseed_scope: {self.reseed_scope}. Must be one of: {VALID_RESEED_SCOPES}"
            )

        if self.version not in VALID_VERSIONS:
            raise ValueError(
                f"Invalid version: {self.version}. Must be one of: {VALID_VERSIONS}"
            )

        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got: {self.max_workers}")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. Must be one of: {VALID_LOG_LEVELS}"
            )

        self.log_level = self.log_level.upper()


class ConfigValidator:
    """Validates and loads configuration from environment variables."""

    @staticmethod
    def parse_headers(headers_json: str) -> dict[str, str]:
        """Parse and validate default headers from a JSON object string."""
        try:
            headers_data = json.loads(headers_json)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in COMPLIANCE_DEFAULT_HEADERS: {e}"
            ) from e

        if not isinstance(headers_data, dict):
            raise ConfigurationError("COMPLIANCE_DEFAULT_HEADERS must be a JSON object")

        headers = {}
        for name, value in headers_data.items():
            if isinstance(value, bool) or not isinstance(value, str | int | float):
                raise ConfigurationError(
                    f"Header {name!r} must have a string value, got: {type(value).__name__}"
                )
            headers[str(name)] = str(value)
        return headers

    @staticmethod
    def get_env_bool(key: str, default: bool = False) -> bool:
        """Get boolean value from environment variable."""
        value = os.getenv(key, str(default)).lower()
        return value in ("true", "1", "yes", "on")

    @staticmethod
    def get_env_int(
        key: str, default: int, min_val: int | None = None, max_val: int | None = None
    ) -> int:
        """Get integer value from environment variable with optional bounds checking."""
        try:
            value = int(os.getenv(key, str(default)))
        except ValueError:
            raise ConfigurationError(
                f"Environment variable {key} must be an integer"
            ) from None

        if min_val is not None and value < min_val:
            raise ConfigurationError(
                f"Environment variable {key} must be >= {min_val}, got: {value}"
            )

        if max_val is not None and value > max_val:
            raise ConfigurationError(
                f"Environment variable {key} must be <= {max_val}, got: {value}"
            )

        return value

    @staticmethod
    def get_env_float(key: str, default: float | None) -> float | None:
        """Get an optional float value from environment variable."""
        raw = os.getenv(key)
        if raw is None or raw.strip() == "":
            return default
        try:
            value = float(raw)
        except ValueError:
            raise ConfigurationError(
                f"Environment variable {key} must be a number"
            ) from None

        if not math.isfinite(value):
            raise ConfigurationError(
                f"Environment variable {key} must be a finite number, got: {raw}"
            )
        return value

    @classmethod
    def load_config(cls) -> HarnessConfig:
        """Load and validate complete configuration from environment variables."""
        try:
            config = HarnessConfig(
                server_url=os.getenv("COMPLIANCE_SERVER_URL", "http://localhost:9090"),
                default_headers=cls.parse_headers(
                    os.getenv("COMPLIANCE_DEFAULT_HEADERS", "{}")
                ),
                request_timeout=cls.get_env_float("COMPLIANCE_REQUEST_TIMEOUT", 30.0),
                run_timeout=cls.get_env_float("COMPLIANCE_RUN_TIMEOUT", None),
                reseed_path=os.getenv("COMPLIANCE_RESEED_PATH", "/Reseed"),
                reseed_scope=os.getenv("COMPLIANCE_RESEED_SCOPE", "suite"),  # type: ignore[arg-type]
                version=os.getenv("COMPLIANCE_VERSION", "all"),
                pattern=os.getenv("COMPLIANCE_PATTERN", ""),
                strict=cls.get_env_bool("COMPLIANCE_STRICT", True),
                max_workers=cls.get_env_int("COMPLIANCE_MAX_WORKERS", 1, 1, 64),
                ready_timeout=cls.get_env_float("COMPLIANCE_READY_TIMEOUT", 0.0),
                verbose=cls.get_env_bool("COMPLIANCE_VERBOSE", False),
                debug=cls.get_env_bool("COMPLIANCE_DEBUG", False),
                report_file=os.getenv("COMPLIANCE_REPORT_FILE") or None,
                log_level=os.getenv("COMPLIANCE_LOG_LEVEL", "INFO"),
            )

            logger.info(
                f"Configuration loaded successfully: server {config.server_url}, version: {config.version}"
            )
            return config

        except Exception as e:
            if isinstance(e, ConfigurationError):
                raise
            else:
                raise ConfigurationError(f"Failed to load configuration: {e}") from e


def load_validated_config() -> HarnessConfig:
    """Load and validate configuration, with user-friendly error messages."""
    try:
        return ConfigValidator.load_config()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Please check your environment variables and .env file")
        raise
    except Exception as e:
        logger.error(f"Unexpected error loading configuration: {e}")
        raise ConfigurationError(
            "Failed to load configuration due to unexpected error"
        ) from e
