# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
11.2.5.8 System Query Option $compute (OData 4.01).

$compute is optional. Services that answer 400 or 501 do not implement it;
strict runs skip those tests, lenient runs pass them with a log line.
"""

from harness.context import TestContext
from harness.suite import TestSuite

from ..helpers import entity_values

FEATURE = "$compute"
UNSUPPORTED = (400, 501)


def _compute_query(path: str, check_property: str | None = None):
    def run(ctx: TestContext):
        resp = ctx.get(path)
        if not ctx.accept_optional(resp, *UNSUPPORTED, feature=FEATURE):
            return
        entities = entity_values(ctx, resp)
        if check_property and entities and check_property not in entities[0]:
            raise ctx.fail(f"computed property {check_property!r} missing from results")

    return run


def query_compute() -> TestSuite:
    suite = TestSuite(
        "11.2.5.8 System Query Option $compute",
        "Validates $compute query option for adding computed properties to query results.",
        "https://docs.oasis-open.org/odata/odata/v4.01/odata-v4.01-part1-protocol.html"
        "#sec_SystemQueryOptioncompute",
    )

    suite.add_test(
        "test_compute_arithmetic",
        "Simple $compute with arithmetic",
        _compute_query("/Products?$compute=Price mul 1.1 as PriceWithTax", "PriceWithTax"),
    )
    suite.add_test(
        "test_compute_string_function",
        "$compute with string function",
        _compute_query("/Products?$compute=toupper(Name) as UpperName", "UpperName"),
    )
    suite.add_test(
        "test_compute_with_select",
        "$compute combined with $select",
        _compute_query(
            "/Products?$compute=Price mul 2 as DoublePrice&$select=Name,DoublePrice",
            "DoublePrice",
        ),
    )
    suite.add_test(
        "test_compute_with_filter",
        "$compute combined with $filter",
        _compute_query(
            "/Products?$compute=Price mul 1.1 as PriceWithTax&$filter=PriceWithTax gt 100"
        ),
    )
    suite.add_test(
        "test_compute_with_orderby",
        "$compute combined with $orderby",
        _compute_query("/Products?$compute=Price div 2 as HalfPrice&$orderby=HalfPrice"),
    )
    suite.add_test(
        "test_multiple_computed",
        "Multiple computed properties",
        _compute_query(
            "/Products?$compute=Price mul 1.1 as WithTax,Price mul 0.9 as Discounted"
        ),
    )

    @suite.test("test_invalid_compute_syntax", "Invalid $compute syntax returns error")
    def invalid_syntax(ctx: TestContext):
        resp = ctx.get("/Products?$compute=InvalidSyntax")
        if resp.status_code == 200:
            raise ctx.fail("invalid $compute syntax was accepted")
        if resp.status_code == 501:
            if ctx.config.strict:
                return ctx.skip(f"{FEATURE} not supported (status 501)")
            ctx.log(f"{FEATURE} not supported (status 501)")
            return
        ctx.assert_status_code(resp, 400)

    return suite
