# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
8.2.2 If-Match / If-None-Match: optimistic concurrency control.

ETags are optional. The first test records the entity path and its ETag;
every later test requires them and is skipped when the service has no ETags.
The recorded ETag belongs to live server data, so the suite is never reseeded
between its tests.
"""

from harness.context import TestContext
from harness.suite import TestSuite

from ..helpers import first_entity_path, non_existing_entity_path

WRONG_ETAG = '"wrong-etag-value"'


def _is_valid_etag(etag: str) -> bool:
    if etag.startswith('W/"'):
        return etag.endswith('"') and len(etag) > 3
    return len(etag) >= 2 and etag.startswith('"') and etag.endswith('"')


def _assert_update_accepted(ctx: TestContext, resp, condition: str) -> None:
    if resp.status_code not in (200, 204):
        raise ctx.fail(f"expected status 200 or 204 {condition}, got {resp.status_code}")


def header_if_match() -> TestSuite:
    suite = TestSuite(
        "8.2.2 If-Match Header",
        "Tests If-Match and If-None-Match headers for optimistic concurrency control.",
        "https://docs.oasis-open.org/odata/odata/v4.0/errata03/os/complete/"
        "part1-protocol/odata-v4.0-errata03-os-part1-protocol-complete.html#sec_HeaderIfMatch",
        reseed_between_tests=False,
    )

    @suite.test("test_etag_in_get_response", "ETag header present in GET response")
    def etag_in_get_response(ctx: TestContext):
        path = first_entity_path(ctx, "Products")
        resp = ctx.get(path)
        ctx.assert_status_code(resp, 200)

        etag = resp.header("ETag")
        if not etag:
            return ctx.skip("ETag header not supported by service")
        if not _is_valid_etag(etag):
            raise ctx.fail(f'ETag must be a quoted string or weak ETag (W/"..."), got: {etag}')

        ctx.state["product_path"] = path
        ctx.state["etag"] = etag
        ctx.log(f"ETag received: {etag}")

    @suite.test(
        "test_if_none_match_with_matching_etag", "If-None-Match with matching ETag returns 304"
    )
    def if_none_match_matching(ctx: TestContext):
        path = ctx.state.require("product_path")
        etag = ctx.state.require("etag")

        resp = ctx.get(path, headers={"If-None-Match": etag})
        ctx.assert_status_code(resp, 304)
        # A 304 carries the ETag a 200 would have carried
        ctx.assert_header(resp, "ETag", etag)
        if resp.body:
            raise ctx.fail(f"304 response should have empty body, got {len(resp.body)} bytes")
        ctx.log("Correctly returned 304 Not Modified for matching ETag")

    @suite.test(
        "test_if_none_match_with_different_etag", "If-None-Match with different ETag returns 200"
    )
    def if_none_match_different(ctx: TestContext):
        path = ctx.state.require("product_path")

        resp = ctx.get(path, headers={"If-None-Match": '"different-etag"'})
        ctx.assert_status_code(resp, 200)
        if not isinstance(ctx.get_json(resp), dict):
            raise ctx.fail("expected an entity object in the response body")

    @suite.test(
        "test_if_match_with_mismatched_etag", "If-Match with mismatched ETag returns 412"
    )
    def if_match_mismatched(ctx: TestContext):
        path = ctx.state.require("product_path")
        ctx.state.require("etag")

        resp = ctx.patch(path, {"Name": "Should fail"}, headers={"If-Match": WRONG_ETAG})
        ctx.assert_status_code(resp, 412)
        ctx.log("Correctly rejected update with mismatched ETag (412)")

    @suite.test("test_if_match_with_valid_etag", "If-Match with valid ETag allows update")
    def if_match_valid(ctx: TestContext):
        path = ctx.state.require("product_path")
        etag = ctx.state.require("etag")

        resp = ctx.patch(path, {"Name": "Updated with If-Match"}, headers={"If-Match": etag})
        _assert_update_accepted(ctx, resp, "with matching ETag")
        ctx.log(f"Update succeeded with If-Match: {etag}")

    @suite.test("test_etag_changes_after_update", "ETag changes after successful update")
    def etag_changes(ctx: TestContext):
        path = ctx.state.require("product_path")

        before = ctx.get(path)
        ctx.assert_status_code(before, 200)
        etag_before = before.header("ETag")
        if not etag_before:
            raise ctx.fail("ETag missing before update")

        _assert_update_accepted(
            ctx, ctx.patch(path, {"Name": "Updated to change ETag"}), "for update"
        )

        after = ctx.get(path)
        ctx.assert_status_code(after, 200)
        etag_after = after.header("ETag")
        if not etag_after:
            raise ctx.fail("ETag missing after update")
        if etag_before == etag_after:
            raise ctx.fail(f"ETag should change after update, but remained: {etag_before}")

        ctx.state["etag"] = etag_after
        ctx.log(f"ETag changed from {etag_before} to {etag_after}")

    @suite.test("test_if_match_star", "If-Match: * matches any version")
    def if_match_star(ctx: TestContext):
        path = ctx.state.require("product_path")

        resp = ctx.patch(path, {"Name": "Updated with If-Match: *"}, headers={"If-Match": "*"})
        _assert_update_accepted(ctx, resp, "with If-Match: *")

    @suite.test(
        "test_if_match_star_nonexistent", "If-Match: * on non-existent entity returns 404"
    )
    def if_match_star_nonexistent(ctx: TestContext):
        ctx.state.require("etag")

        resp = ctx.patch(
            non_existing_entity_path("Products"),
            {"Name": "Should fail"},
            headers={"If-Match": "*"},
        )
        ctx.assert_status_code(resp, 404)

    return suite
