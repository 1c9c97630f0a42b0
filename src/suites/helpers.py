# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Shared helpers for conformance suites that need real entities to work with.
"""

import logging
from typing import Any

from harness.assertions import check_status_code
from harness.context import TestContext
from harness.errors import AssertionFailure

logger = logging.getLogger(__name__)

NON_EXISTING_UUID = "00000000-0000-0000-0000-000000000000"


def _first_entity(ctx: TestContext, entity_set: str) -> dict[str, Any]:
    # Select only ID for a minimal payload
    resp = ctx.get(f"/{entity_set}?$top=1&$select=ID")
    failure = check_status_code(resp, 200)
    if failure is not None:
        raise AssertionFailure(f"list {entity_set}: {failure}")

    try:
        entities = resp.json().get("value", [])
    except (ValueError, AttributeError) as e:
        raise AssertionFailure(f"parse {entity_set} list: {e}") from e

    if not entities:
        raise AssertionFailure(f"no entities in {entity_set}")
    if not isinstance(entities[0], dict) or entities[0].get("ID") is None:
        raise AssertionFailure(f"entity in {entity_set} missing ID")
    return entities[0]


def first_entity_path(ctx: TestContext, entity_set: str) -> str:
    """Return the canonical path of the first entity, e.g. ``/Products(1)``."""
    return f"/{entity_set}({parse_entity_id(_first_entity(ctx, entity_set)['ID'])})"


def first_entity_id(ctx: TestContext, entity_set: str) -> str:
    """Return the ID of the first entity in the set, for use as a foreign key."""
    return parse_entity_id(_first_entity(ctx, entity_set)["ID"])


def parse_entity_id(value: Any) -> str:
    """Render an entity key as a literal usable inside a key segment."""
    if value is None:
        raise AssertionFailure("entity ID is missing")
    if isinstance(value, str):
        if not value:
            raise AssertionFailure("entity ID is empty")
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise AssertionFailure(f"entity ID must be an integer, got {value}")
        return str(int(value))
    return str(value)


def non_existing_entity_path(entity_set: str) -> str:
    return f"/{entity_set}({NON_EXISTING_UUID})"


def build_product_payload(ctx: TestContext, name: str, price: float) -> dict[str, Any]:
    return {
        "Name": name,
        "Price": price,
        "CategoryID": first_entity_id(ctx, "Categories"),
        "Status": 1,
    }


def create_test_product(ctx: TestContext, name: str, price: float) -> str:
    """Create a product and return its ID; the server must answer 201."""
    resp = ctx.post("/Products", build_product_payload(ctx, name, price))
    ctx.assert_status_code(resp, 201)
    body = ctx.get_json(resp)
    if not isinstance(body, dict):
        raise AssertionFailure("product creation response is not a JSON object")
    product_id = parse_entity_id(body.get("ID"))
    logger.debug(f"Created test product {name!r} with ID {product_id}")
    return product_id


def entity_values(ctx: TestContext, resp) -> list[dict[str, Any]]:
    """Return the ``value`` array of a collection response."""
    ctx.assert_json_field(resp, "value")
    value = ctx.get_json(resp)["value"]
    if not isinstance(value, list):
        raise ctx.fail("value must be an array")
    return value


def numeric(value: Any, field: str) -> float:
    """Coerce a JSON number (or IEEE754-compatible string) to float."""
    if isinstance(value, bool) or value is None:
        raise AssertionFailure(f"{field} must be numeric, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise AssertionFailure(f"failed to parse {field} as number: {value!r}") from e
