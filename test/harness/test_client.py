# Copyright 2025 Nokia
# Licensed under the BSD 3-Clause License.
# SPDX-License-Identifier: BSD-3-Clause

"""
Tests for the HTTP client adapter.
"""

import json
import unittest
from unittest.mock import MagicMock, patch

import requests
from requests.structures import CaseInsensitiveDict

from harness.client import (
    HTTPResponse,
    HttpClient,
    encode_body,
    get_readiness_retry_configuration,
    normalize_path,
)
from harness.errors import HarnessError, TransportError

from utils import make_config, make_requests_response


class TestNormalizePath(unittest.TestCase):
    def test_path_without_query_is_unchanged(self):
        self.assertEqual(normalize_path("/Products(1)"), "/Products(1)")

    def test_spaces_become_percent_20(self):
        self.assertEqual(
            normalize_path("/Products?$filter=Price gt 100"),
            "/Products?$filter=Price%20gt%20100",
        )

    def test_odata_punctuation_is_kept(self):
        self.assertEqual(
            normalize_path("/Products?$filter=contains(Name,'Laptop')"),
            "/Products?$filter=contains(Name,'Laptop')",
        )

    def test_multiple_options(self):
        self.assertEqual(
            normalize_path("/Products?$top=1&$select=ID,Name"),
            "/Products?$top=1&$select=ID,Name",
        )

    def test_pre_encoded_query_is_not_double_encoded(self):
        self.assertEqual(
            normalize_path("/Products?$filter=Price%20gt%20100"),
            "/Products?$filter=Price%20gt%20100",
        )


class TestEncodeBody(unittest.TestCase):
    def test_none(self):
        headers = CaseInsensitiveDict()
        self.assertIsNone(encode_body(None, headers))
        self.assertNotIn("Content-Type", headers)

    def test_dict_is_json_with_default_content_type(self):
        headers = CaseInsensitiveDict()
        data = encode_body({"Price": 10}, headers)
        self.assertEqual(json.loads(data), {"Price": 10})
        self.assertEqual(headers["content-type"], "application/json")

    def test_supplied_content_type_wins(self):
        headers = CaseInsensitiveDict({"content-type": "application/json;odata.metadata=full"})
        encode_body({"Price": 10}, headers)
        self.assertEqual(headers["Content-Type"], "application/json;odata.metadata=full")

    def test_bytes_and_str_are_sent_as_is(self):
        headers = CaseInsensitiveDict()
        self.assertEqual(encode_body(b"<xml/>", headers), b"<xml/>")
        self.assertEqual(encode_body("raw", headers), b"raw")
        self.assertNotIn("Content-Type", headers)


class TestHTTPResponse(unittest.TestCase):
    def test_header_lookup_is_case_insensitive(self):
        resp = HTTPResponse(200, CaseInsensitiveDict({"OData-Version": "4.0"}), b"{}")
        self.assertEqual(resp.header("odata-version"), "4.0")
        self.assertEqual(resp.header("ETag"), "")

    def test_text_and_json(self):
        resp = HTTPResponse(200, CaseInsensitiveDict(), b'{"value": []}')
        self.assertEqual(resp.text, '{"value": []}')
        self.assertEqual(resp.json(), {"value": []})


class TestHttpClient(unittest.TestCase):
    def setUp(self):
        self.client = HttpClient(
            "http://odata.test/", default_headers={"Accept": "application/json"}
        )

    def tearDown(self):
        self.client.close()

    def test_resolve(self):
        self.assertEqual(self.client.resolve("/Products"), "http://odata.test/Products")
        self.assertEqual(self.client.resolve("Products"), "http://odata.test/Products")
        self.assertEqual(
            self.client.resolve("http://other.test/Products?$skiptoken=5"),
            "http://other.test/Products?$skiptoken=5",
        )

    @patch("requests.Session.request")
    def test_request_normalizes_response(self, mock_request):
        mock_request.return_value = make_requests_response(
            200, {"value": [{"Price": 150}]}, {"Content-Type": "application/json"}
        )

        resp = self.client.request("GET", "/Products?$filter=Price gt 100")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.header("content-type"), "application/json")
        self.assertEqual(resp.json(), {"value": [{"Price": 150}]})
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("GET", "http://odata.test/Products?$filter=Price%20gt%20100"))
        self.assertEqual(kwargs["timeout"], 30.0)
        self.assertEqual(kwargs["headers"]["Accept"], "application/json")

    @patch("requests.Session.request")
    def test_error_status_is_not_an_error(self, mock_request):
        mock_request.return_value = make_requests_response(404, {"error": {}})
        resp = self.client.request("GET", "/Missing")
        self.assertEqual(resp.status_code, 404)

    @patch("requests.Session.request")
    def test_per_request_headers_override_defaults(self, mock_request):
        mock_request.return_value = make_requests_response(204)
        self.client.request("PATCH", "/Products(1)", body={"Price": 1}, headers={"accept": "*/*"})

        kwargs = mock_request.call_args.kwargs
        sent = CaseInsensitiveDict(kwargs["headers"])
        self.assertEqual(len(sent), 2)
        self.assertEqual(sent["Accept"], "*/*")
        self.assertEqual(sent["Content-Type"], "application/json")
        self.assertEqual(json.loads(kwargs["data"]), {"Price": 1})

    @patch("requests.Session.request")
    def test_connection_error_becomes_transport_error(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(TransportError) as context:
            self.client.request("GET", "/")
        self.assertTrue(str(context.exception).startswith("transport error: GET"))
        self.assertIn("connection refused", str(context.exception))

    @patch("requests.Session.request")
    def test_timeout_becomes_transport_error(self, mock_request):
        mock_request.side_effect = requests.Timeout()
        with self.assertRaises(TransportError) as context:
            self.client.request("GET", "/Products")
        self.assertIn("timed out after 30.0s", str(context.exception))
        self.assertEqual(context.exception.url, "http://odata.test/Products")

    @patch("requests.Session.request")
    def test_request_is_never_retried(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("reset")
        with self.assertRaises(TransportError):
            self.client.request("POST", "/Products", body={"Name": "x"})
        self.assertEqual(mock_request.call_count, 1)

    @patch("requests.Session.request")
    def test_reseed(self, mock_request):
        mock_request.return_value = make_requests_response(200)
        self.client.reseed("/Reseed")
        self.assertEqual(mock_request.call_args.args, ("POST", "http://odata.test/Reseed"))

    @patch("requests.Session.request")
    def test_reseed_failure(self, mock_request):
        mock_request.return_value = make_requests_response(500, "database locked")
        with self.assertRaises(HarnessError) as context:
            self.client.reseed()
        self.assertIn("500", str(context.exception))
        self.assertIn("database locked", str(context.exception))

    @patch("requests.Session.request")
    def test_is_reachable(self, mock_request):
        mock_request.return_value = make_requests_response(200, {"value": []})
        self.assertTrue(self.client.is_reachable())

        mock_request.return_value = make_requests_response(503)
        self.assertFalse(self.client.is_reachable())

        mock_request.side_effect = requests.ConnectionError("refused")
        self.assertFalse(self.client.is_reachable())

    def test_from_config(self):
        config = make_config(default_headers={"X-Test": "1"}, request_timeout=5, debug=True)
        with HttpClient.from_config(config) as client:
            self.assertEqual(client.base_url, "http://odata.test")
            self.assertEqual(client.default_headers, {"X-Test": "1"})
            self.assertEqual(client.timeout, 5)
            self.assertTrue(client.debug)

    def test_context_manager_closes_session(self):
        session = MagicMock()
        with HttpClient("http://odata.test", session=session):
            pass
        session.close.assert_called_once()

    @patch("requests.Session.request")
    def test_debug_logging(self, mock_request):
        mock_request.return_value = make_requests_response(200, {"value": []})
        client = HttpClient("http://odata.test", debug=True)
        with self.assertLogs("harness.client", level="DEBUG") as logs:
            client.request("POST", "/Products", body={"Name": "x"})
        output = "\n".join(logs.output)
        self.assertIn("HTTP request: POST http://odata.test/Products", output)
        self.assertIn("HTTP response: 200", output)


class TestWaitUntilReady(unittest.TestCase):
    def test_retry_configuration(self):
        config = get_readiness_retry_configuration(10)
        self.assertTrue(config["reraise"])
        self.assertIn("stop", config)
        self.assertIn("wait", config)

    @patch("harness.client.get_readiness_retry_configuration")
    @patch("requests.Session.request")
    def test_waits_until_server_answers(self, mock_request, mock_config):
        from tenacity import retry_if_exception_type, stop_after_attempt, wait_none

        mock_config.return_value = {
            "stop": stop_after_attempt(3),
            "wait": wait_none(),
            "retry": retry_if_exception_type(TransportError),
            "reraise": True,
        }
        mock_request.side_effect = [
            requests.ConnectionError("refused"),
            make_requests_response(503),
            make_requests_response(200, {"value": []}),
        ]

        HttpClient("http://odata.test").wait_until_ready(10)
        self.assertEqual(mock_request.call_count, 3)

    @patch("harness.client.get_readiness_retry_configuration")
    @patch("requests.Session.request")
    def test_raises_transport_error_when_exhausted(self, mock_request, mock_config):
        from tenacity import retry_if_exception_type, stop_after_attempt, wait_none

        mock_config.return_value = {
            "stop": stop_after_attempt(2),
            "wait": wait_none(),
            "retry": retry_if_exception_type(TransportError),
            "reraise": True,
        }
        mock_request.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(TransportError):
            HttpClient("http://odata.test").wait_until_ready(1)
        self.assertEqual(mock_request.call_count, 2)


if __name__ == "__main__":
    unittest.main()
