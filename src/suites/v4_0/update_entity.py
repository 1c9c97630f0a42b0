# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
11.4.3 Update an Entity: PATCH and PUT semantics.

Every test that modifies data creates its own product, so a reseed between
tests never leaves a later test pointing at a product that no longer exists.
The first test records whether the service accepts product creation at all;
when it does not, the dependent tests are skipped instead of failed.
"""

import json

from harness.context import TestContext
from harness.suite import TestSuite

from ..helpers import (
    build_product_payload,
    create_test_product,
    first_entity_id,
    non_existing_entity_path,
    numeric,
    parse_entity_id,
)

CAN_CREATE = "can_create_products"


def _assert_update_accepted(ctx: TestContext, resp) -> None:
    if resp.status_code not in (200, 204):
        raise ctx.fail(f"expected status 200 or 204, got {resp.status_code}")


def _current_entity(ctx: TestContext, path: str) -> dict:
    resp = ctx.get(path)
    ctx.assert_status_code(resp, 200)
    entity = ctx.get_json(resp)
    if not isinstance(entity, dict):
        raise ctx.fail(f"expected an entity object from {path}")
    return entity


def _fresh_product(ctx: TestContext, name: str, price: float) -> str:
    ctx.state.require(CAN_CREATE)
    return f"/Products({create_test_product(ctx, name, price)})"


def update_entity() -> TestSuite:
    suite = TestSuite(
        "11.4.3 Update an Entity",
        "Tests PATCH and PUT operations for updating entities.",
        "https://docs.oasis-open.org/odata/odata/v4.0/errata03/os/complete/"
        "part1-protocol/odata-v4.0-errata03-os-part1-protocol-complete.html#sec_UpdateanEntity",
    )

    @suite.test("test_create_product", "POST creates a product that can be read back")
    def create_product(ctx: TestContext):
        payload = build_product_payload(ctx, "UpdateEntityCreate", 199.99)
        resp = ctx.post_raw(
            "/Products", json.dumps(payload).encode("utf-8"), "application/json"
        )
        ctx.assert_status_code(resp, 201)

        created = ctx.get_json(resp)
        if not isinstance(created, dict):
            raise ctx.fail("product creation response is not a JSON object")
        path = f"/Products({parse_entity_id(created.get('ID'))})"
        if _current_entity(ctx, path).get("Name") != "UpdateEntityCreate":
            raise ctx.fail(f"{path} does not return the created product")

        ctx.state[CAN_CREATE] = True
        ctx.log(f"Created {path}")

    @suite.test("test_patch_update", "PATCH updates specified properties (partial update)")
    def patch_update(ctx: TestContext):
        path = _fresh_product(ctx, "UpdateEntityPatch", 199.99)
        original = _current_entity(ctx, path)

        _assert_update_accepted(ctx, ctx.patch(path, {"Price": 149.99}))

        updated = _current_entity(ctx, path)
        if numeric(updated.get("Price"), "Price") != 149.99:
            raise ctx.fail(f"Price not updated, got {updated.get('Price')!r}")
        if updated.get("Name") != original.get("Name"):
            raise ctx.fail("PATCH must leave properties that were not sent unchanged")

    @suite.test("test_put_full_replacement", "PUT replaces entire entity (full update)")
    def put_full_replacement(ctx: TestContext):
        path = _fresh_product(ctx, "UpdateEntityPut", 299.99)
        current = _current_entity(ctx, path)

        replacement = {
            "Name": "Completely Replaced Product",
            "Price": 399.99,
            "CategoryID": current.get("CategoryID"),
            "Status": current.get("Status"),
        }
        resp = ctx.put_raw(
            path, json.dumps(replacement).encode("utf-8"), "application/json"
        )
        _assert_update_accepted(ctx, resp)

        if resp.status_code == 200:
            body = ctx.get_json(resp)
            if not isinstance(body, dict) or "ID" not in body:
                raise ctx.fail("200 response body should include the entity with ID")

        result = _current_entity(ctx, path)
        if result.get("Name") != "Completely Replaced Product":
            raise ctx.fail("Name not replaced correctly")
        if numeric(result.get("Price"), "Price") != 399.99:
            raise ctx.fail("Price not replaced correctly")
        ctx.log("Entity fully replaced with PUT")

    @suite.test("test_patch_invalid_property", "PATCH with invalid property returns 400")
    def patch_invalid_property(ctx: TestContext):
        path = _fresh_product(ctx, "UpdateEntityInvalid", 99.99)
        resp = ctx.patch(path, {"NonExistentProperty": "value"})
        ctx.assert_status_code(resp, 400)

    @suite.test("test_patch_no_content_type", "PATCH without Content-Type returns 400 or 415")
    def patch_no_content_type(ctx: TestContext):
        path = _fresh_product(ctx, "UpdateEntityNoContentType", 99.99)
        payload = json.dumps({"Price": 99.99}).encode("utf-8")
        resp = ctx.request("PATCH", path, body=payload)
        ctx.assert_status_in(resp, 400, 415)

    @suite.test("test_patch_not_found", "PATCH to non-existent entity returns 404")
    def patch_not_found(ctx: TestContext):
        resp = ctx.patch(non_existing_entity_path("Products"), {"Price": 100})
        ctx.assert_status_code(resp, 404)

    @suite.test("test_put_nonexistent_entity", "PUT on non-existent entity returns 404")
    def put_nonexistent(ctx: TestContext):
        replacement = {
            "Name": "Should Not Be Created",
            "Price": 99.99,
            "CategoryID": first_entity_id(ctx, "Categories"),
            "Status": 1,
        }
        resp = ctx.put(non_existing_entity_path("Products"), replacement)
        ctx.assert_status_code(resp, 404)

    @suite.test("test_delete_entity", "DELETE removes the product")
    def delete_entity(ctx: TestContext):
        path = _fresh_product(ctx, "UpdateEntityDelete", 59.99)

        ctx.assert_status_code(ctx.delete(path), 204)
        ctx.assert_status_code(ctx.get(path), 404)

    @suite.test("test_patch_deleted_entity", "PATCH to a deleted entity returns 404")
    def patch_deleted(ctx: TestContext):
        path = _fresh_product(ctx, "UpdateEntityPatchDeleted", 59.99)
        ctx.assert_status_code(ctx.delete(path), 204)

        resp = ctx.patch(path, {"Price": 1.0})
        ctx.assert_status_code(resp, 404)

    return suite
