# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
2.1 Conformance: baseline requirements every OData service must meet.
"""

from harness.assertions import contains_any
from harness.context import TestContext
from harness.suite import TestSuite

from ..helpers import first_entity_path


def conformance() -> TestSuite:
    suite = TestSuite(
        "2.1 Conformance",
        "Tests service conformance to OData v4 requirements including response "
        "formats, required headers, metadata availability and protocol compliance.",
        "https://docs.oasis-open.org/odata/odata/v4.0/errata03/os/complete/"
        "part1-protocol/odata-v4.0-errata03-os-part1-protocol-complete.html#sec_Conformance",
    )

    @suite.test("test_service_document_required", "Service returns service document (MUST)")
    def service_document(ctx: TestContext):
        ctx.assert_status_code(ctx.get("/"), 200)

    @suite.test("test_metadata_document_required", "Service returns metadata document (MUST)")
    def metadata_document(ctx: TestContext):
        resp = ctx.get("/$metadata")
        ctx.assert_status_code(resp, 200)
        if not resp.body:
            raise ctx.fail("$metadata response body is empty")
        # CSDL XML has an edmx:Edmx root, CSDL JSON a $Version member
        if not contains_any(resp.text, "<edmx:Edmx", '"$Version"'):
            raise ctx.fail("$metadata is neither a CSDL XML nor a CSDL JSON document")

    @suite.test("test_json_format_support", "Service supports JSON format (MUST)")
    def json_format(ctx: TestContext):
        resp = ctx.get("/", headers={"Accept": "application/json"})
        if not ctx.is_valid_json(resp):
            raise ctx.fail("service must support JSON format (invalid JSON response)")
        ctx.assert_json_field(resp, "value")

    @suite.test("test_odata_version_header", "Service includes OData-Version header (MUST)")
    def odata_version_header(ctx: TestContext):
        resp = ctx.get("/")
        if not resp.header("OData-Version"):
            raise ctx.fail("OData-Version header is required in responses")
        ctx.log(f"OData-Version: {resp.header('OData-Version')}")

    @suite.test("test_get_entity_sets", "Service supports GET on entity sets (MUST)")
    def entity_sets(ctx: TestContext):
        resp = ctx.get("/Products")
        ctx.assert_status_code(resp, 200)
        ctx.assert_header_contains(resp, "Content-Type", "application/json")

    @suite.test("test_get_single_entity", "Service supports GET on single entities (MUST)")
    def single_entity(ctx: TestContext):
        path = first_entity_path(ctx, "Products")
        resp = ctx.get(path)
        ctx.assert_status_code(resp, 200)
        ctx.assert_json_field(resp, "ID")

    @suite.test(
        "test_404_for_missing_resource", "Service returns 404 for non-existent resources (MUST)"
    )
    def missing_resource(ctx: TestContext):
        ctx.assert_status_code(ctx.get("/NonExistentEntitySet"), 404)

    return suite
