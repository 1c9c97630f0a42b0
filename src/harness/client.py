# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

import requests
from requests.structures import CaseInsensitiveDict

# Using tenacity for readiness polling only; test requests are never retried
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_delay,
    wait_exponential,
)

from .errors import HarnessError, TransportError
from .validation import HarnessConfig

logger = logging.getLogger(__name__)

# Characters OData URLs use literally inside query option values
QUERY_SAFE_CHARS = "$,()'*:@/"


@dataclass(frozen=True)
class HTTPResponse:
    """Normalized, immutable HTTP response."""

    status_code: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: bytes = b""

    def header(self, name: str, default: str = "") -> str:
        return self.headers.get(name, default)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)


def normalize_path(path: str) -> str:
    """Re-encode the query string so callers can pass unencoded OData options."""
    if "?" not in path:
        return path
    base, _, query = path.partition("?")
    pairs = parse_qsl(query, keep_blank_values=True)
    if not pairs:
        return base
    return base + "?" + urlencode(pairs, quote_via=quote, safe=QUERY_SAFE_CHARS)


def encode_body(
    body: Any, headers: CaseInsensitiveDict
) -> bytes | None:
    """Serialize a request body, defaulting structured payloads to JSON."""
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if "Content-Type" not in headers:
        headers["Content-Type"] = "application/json"
    return json.dumps(body).encode("utf-8")


def get_readiness_retry_configuration(timeout: float) -> dict[str, Any]:
    """Retry configuration used while waiting for the server to come up."""
    return {
        "stop": stop_after_delay(timeout),
        "wait": wait_exponential(multiplier=0.5, max=5.0),
        "retry": retry_if_exception_type(TransportError),
        "before_sleep": before_sleep_log(logger, logging.WARNING),
        "reraise": True,
    }


class HttpClient:
    """Thin adapter over a requests session bound to the server under test."""

    def __init__(
        self,
        base_url: str,
        default_headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        debug: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.default_headers = dict(default_headers or {})
        self.timeout = timeout
        self.debug = debug
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: HarnessConfig) -> "HttpClient":
        return cls(
            config.server_url,
            default_headers=config.default_headers,
            timeout=config.request_timeout,
            debug=config.debug,
        )

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def resolve(self, path: str) -> str:
        """Resolve a path (or absolute URL) to the URL that will be requested."""
        if urlsplit(path).scheme in ("http", "https"):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url + normalize_path(path)

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> HTTPResponse:
        """Perform one HTTP exchange; HTTP error statuses are not errors here."""
        url = self.resolve(path)
        merged = CaseInsensitiveDict(self.default_headers)
        merged.update(headers or {})
        data = encode_body(body, merged)

        if self.debug:
            self._debug_request(method, url, merged, data)

        try:
            response = self.session.request(
                method, url, data=data, headers=dict(merged), timeout=self.timeout
            )
        except requests.Timeout as e:
            raise TransportError(method, url, f"timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise TransportError(method, url, str(e)) from e

        result = HTTPResponse(
            status_code=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
            body=response.content,
        )

        if self.debug:
            self._debug_response(result)

        return result

    def reseed(self, path: str = "/Reseed") -> None:
        """Ask the server under test to reset its data to the seed state."""
        response = self.request(
            "POST", path, headers={"Content-Type": "application/json"}
        )
        if response.status_code != 200:
            raise HarnessError(
                f"Reseed returned status {response.status_code}: {response.text[:200]}"
            )
        logger.debug("Database reseeded")

    def is_reachable(self) -> bool:
        try:
            return self.request("GET", "/").status_code == 200
        except TransportError as e:
            logger.debug(f"Server probe failed: {e}")
            return False

    def _probe(self) -> None:
        response = self.request("GET", "/")
        if response.status_code != 200:
            raise TransportError(
                "GET", self.base_url + "/", f"service root returned {response.status_code}"
            )

    def wait_until_ready(self, timeout: float) -> None:
        """Poll the service root until it answers 200 or the timeout expires."""
        logger.info(f"Waiting up to {timeout}s for {self.base_url} to become ready")
        for attempt in Retrying(**get_readiness_retry_configuration(timeout)):
            with attempt:
                self._probe()
        logger.info("Server is ready")

    def _debug_request(
        self, method: str, url: str, headers: CaseInsensitiveDict, data: bytes | None
    ) -> None:
        lines = [f"HTTP request: {method} {url}"]
        lines.extend(f"  {name}: {value}" for name, value in headers.items())
        if data:
            lines.append(_pretty_body(data))
        logger.debug("\n".join(lines))

    def _debug_response(self, response: HTTPResponse) -> None:
        lines = [f"HTTP response: {response.status_code}"]
        if response.body:
            lines.append(_pretty_body(response.body))
        logger.debug("\n".join(lines))


def _pretty_body(data: bytes) -> str:
    try:
        return json.dumps(json.loads(data), indent=2)
    except ValueError:
        return data.decode("utf-8", errors="replace")
