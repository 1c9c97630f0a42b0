# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Assertion library for normalized HTTP responses.

Every check is a pure function that returns ``None`` when the response
satisfies it and an ``AssertionFailure`` describing expected vs. actual
otherwise. Raising is left to the caller (see ``TestContext.assert_*``).
"""

import json
import re
from typing import Any

from .client import HTTPResponse
from .errors import AssertionFailure

BODY_PREVIEW_LENGTH = 200

_MISSING = object()
_PATH_TOKEN = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def body_preview(resp: HTTPResponse, limit: int = BODY_PREVIEW_LENGTH) -> str:
    text = resp.text
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def decode_json(resp: HTTPResponse) -> Any:
    """Decode the response body, raising AssertionFailure on malformed JSON."""
    try:
        return json.loads(resp.body)
    except ValueError as e:
        raise AssertionFailure(f"invalid JSON response: {e}") from e


def lookup_json_path(data: Any, path: str) -> Any:
    """
    Resolve a dotted path such as ``value[0].Price`` against decoded JSON.

    Returns the module-private sentinel when any segment is missing, so a
    present ``null`` can be told apart from an absent field.
    """
    # Control-information keys like "@odata.count" contain dots themselves
    if isinstance(data, dict) and path in data:
        return data[path]
    current = data
    for name, index in _PATH_TOKEN.findall(path):
        if index:
            if not isinstance(current, list) or int(index) >= len(current):
                return _MISSING
            current = current[int(index)]
        elif isinstance(current, dict) and name in current:
            current = current[name]
        else:
            return _MISSING
    return current


def has_json_path(data: Any, path: str) -> bool:
    return lookup_json_path(data, path) is not _MISSING


def check_status_code(resp: HTTPResponse, expected: int) -> AssertionFailure | None:
    if resp.status_code != expected:
        return AssertionFailure(
            f"expected status {expected}, got {resp.status_code}, body: {body_preview(resp)}"
        )
    return None


def check_status_in(resp: HTTPResponse, *expected: int) -> AssertionFailure | None:
    if resp.status_code not in expected:
        allowed = " or ".join(str(code) for code in expected)
        return AssertionFailure(
            f"expected status {allowed}, got {resp.status_code}, body: {body_preview(resp)}"
        )
    return None


def check_header(resp: HTTPResponse, name: str, expected: str) -> AssertionFailure | None:
    actual = resp.header(name)
    if actual != expected:
        return AssertionFailure(f"header {name}: {actual!r} (expected {expected!r})")
    return None


def check_header_contains(
    resp: HTTPResponse, name: str, substring: str
) -> AssertionFailure | None:
    actual = resp.header(name)
    if substring not in actual:
        return AssertionFailure(
            f"header {name}: {actual!r} does not contain {substring!r}"
        )
    return None


def check_body_contains(resp: HTTPResponse, substring: str) -> AssertionFailure | None:
    if substring not in resp.text:
        return AssertionFailure(
            f"expected {substring!r} not found in response body: {body_preview(resp)}"
        )
    return None


def check_json_field(resp: HTTPResponse, path: str) -> AssertionFailure | None:
    try:
        data = decode_json(resp)
    except AssertionFailure as e:
        return e
    if not has_json_path(data, path):
        return AssertionFailure(f"field {path!r} not found in JSON response")
    return None


def check_valid_json(resp: HTTPResponse) -> AssertionFailure | None:
    try:
        decode_json(resp)
    except AssertionFailure as e:
        return e
    return None


def contains_any(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)
