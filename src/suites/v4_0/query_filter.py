# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
11.2.5.1 System Query Option $filter.
"""

from collections.abc import Callable

from harness.context import TestContext
from harness.suite import TestSuite

from ..helpers import entity_values, numeric


def _filtered(ctx: TestContext, expression: str) -> list[dict]:
    resp = ctx.get(f"/Products?$filter={expression}")
    ctx.assert_status_code(resp, 200)
    return entity_values(ctx, resp)


def _assert_prices(
    ctx: TestContext, entities: list[dict], predicate: Callable[[float], bool], expected: str
) -> None:
    for entity in entities:
        if "Price" not in entity:
            raise ctx.fail("entity must have Price field")
        price = numeric(entity["Price"], "Price")
        if not predicate(price):
            raise ctx.fail(f"found entity with Price={price} which is not {expected}")


def _assert_names(ctx: TestContext, entities: list[dict], allowed: set[str]) -> None:
    for entity in entities:
        name = entity.get("Name")
        if not isinstance(name, str):
            raise ctx.fail("entity must have Name field as string")
        if name not in allowed:
            raise ctx.fail(f"found entity with Name={name!r}, expected one of {sorted(allowed)}")


def query_filter() -> TestSuite:
    suite = TestSuite(
        "11.2.5.1 System Query Option $filter",
        "Tests $filter query option including equality, comparison and logical operators.",
        "https://docs.oasis-open.org/odata/odata/v4.0/errata03/os/complete/"
        "part1-protocol/odata-v4.0-errata03-os-part1-protocol-complete.html"
        "#sec_SystemQueryOptionfilter",
    )

    @suite.test("test_filter_eq", "$filter with eq operator")
    def filter_eq(ctx: TestContext):
        entities = _filtered(ctx, "Name eq 'Laptop'")
        if not entities:
            raise ctx.fail("expected at least 1 entity, got 0")
        _assert_names(ctx, entities, {"Laptop"})

    @suite.test("test_filter_gt", "$filter with gt operator")
    def filter_gt(ctx: TestContext):
        entities = _filtered(ctx, "Price gt 100")
        if not entities:
            raise ctx.fail("no entities returned for Price gt 100")
        _assert_prices(ctx, entities, lambda price: price > 100, "> 100")

    @suite.test("test_filter_lt", "$filter with lt operator")
    def filter_lt(ctx: TestContext):
        entities = _filtered(ctx, "Price lt 100")
        _assert_prices(ctx, entities, lambda price: price < 100, "< 100")

    @suite.test("test_filter_contains", "$filter with contains() function")
    def filter_contains(ctx: TestContext):
        entities = _filtered(ctx, "contains(Name,'Laptop')")
        if not entities:
            raise ctx.fail("expected at least one product with 'Laptop' in its name")
        for entity in entities:
            name = entity.get("Name")
            if not isinstance(name, str) or "Laptop" not in name:
                raise ctx.fail(f"found entity with Name={name!r} which does not contain 'Laptop'")

    @suite.test("test_filter_and", "$filter with 'and' operator")
    def filter_and(ctx: TestContext):
        entities = _filtered(ctx, "Price gt 10 and Price lt 1000")
        if not entities:
            raise ctx.fail("no entities returned for Price gt 10 and Price lt 1000")
        _assert_prices(ctx, entities, lambda price: 10 < price < 1000, "in range (10, 1000)")

    @suite.test("test_filter_or", "$filter with 'or' operator")
    def filter_or(ctx: TestContext):
        entities = _filtered(ctx, "Name eq 'Laptop' or Name eq 'Wireless Mouse'")
        if not entities:
            raise ctx.fail("expected at least 1 entity, got 0")
        _assert_names(ctx, entities, {"Laptop", "Wireless Mouse"})

    @suite.test("test_filter_parentheses", "$filter with parentheses")
    def filter_parentheses(ctx: TestContext):
        entities = _filtered(ctx, "(Price gt 100) and (Price lt 1000)")
        _assert_prices(ctx, entities, lambda price: 100 < price < 1000, "in range (100, 1000)")

    @suite.test("test_filter_invalid_syntax", "Invalid $filter expression returns 400")
    def filter_invalid(ctx: TestContext):
        resp = ctx.get("/Products?$filter=Price gt")
        ctx.assert_status_code(resp, 400)

    return suite
