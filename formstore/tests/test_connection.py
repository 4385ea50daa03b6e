import json
import unittest
from unittest.mock import patch

import requests

from formstore.config import Settings
from formstore.connection import RemoteError, SupabaseConnection
from formstore.errors import ConfigurationMissing


def _response(status: int, body: bytes = b"", reason: str = "OK") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.reason = reason
    response.encoding = "utf-8"
    return response


class SupabaseConnectionSetupTests(unittest.TestCase):
    def test_missing_values_fail_fast(self):
        for url, key in [
            (None, "key"),
            ("https://demo.supabase.co", None),
            ("   ", "key"),
            ("https://demo.supabase.co", "  "),
            ("https://demo.supabase.co", "''"),
        ]:
            with self.subTest(url=url, key=key):
                with self.assertRaises(ConfigurationMissing):
                    SupabaseConnection(url, key)

    def test_trims_url_and_strips_quotes_from_key(self):
        conn = SupabaseConnection(" https://demo.supabase.co/ ", ' "anon-key" ')
        self.assertEqual(conn.url, "https://demo.supabase.co")
        self.assertEqual(conn.session.headers["apikey"], "anon-key")
        self.assertEqual(conn.session.headers["Authorization"], "Bearer anon-key")

    def test_session_headers(self):
        conn = SupabaseConnection("https://demo.supabase.co", "anon-key")
        headers = conn.session.headers
        self.assertEqual(headers["Content-Type"], "application/json")
        self.assertEqual(headers["Prefer"], "return=minimal")
        self.assertEqual(headers["Accept-Profile"], "public")

    def test_from_settings(self):
        settings = Settings(
            _env_file=None,
            supabase_url="https://demo.supabase.co",
            supabase_anon_key="anon-key",
            supabase_schema="forms",
        )
        conn = SupabaseConnection.from_settings(settings)
        self.assertEqual(conn.schema, "forms")
        self.assertEqual(conn.session.headers["Content-Profile"], "forms")


class SupabaseConnectionRequestTests(unittest.TestCase):
    def setUp(self):
        self.conn = SupabaseConnection("https://demo.supabase.co", "anon-key")

    def test_insert_posts_rows(self):
        rows = [{"name": "Ana", "phone": None}]
        with patch.object(
            self.conn.session, "request", return_value=_response(201)
        ) as request:
            self.assertIsNone(self.conn.insert("contact_submissions", rows))
        request.assert_called_once_with(
            "POST",
            "https://demo.supabase.co/rest/v1/contact_submissions",
            data=json.dumps(rows),
        )

    def test_select_orders_descending(self):
        body = b'[{"name": "b"}, {"name": "a"}]'
        with patch.object(
            self.conn.session, "request", return_value=_response(200, body)
        ) as request:
            rows = self.conn.select(
                "contact_submissions", order_by="created_at", descending=True
            )
        self.assertEqual(rows, [{"name": "b"}, {"name": "a"}])
        request.assert_called_once_with(
            "GET",
            "https://demo.supabase.co/rest/v1/contact_submissions",
            params={"select": "*", "order": "created_at.desc"},
        )

    def test_select_empty_body(self):
        with patch.object(self.conn.session, "request", return_value=_response(200)):
            self.assertEqual(self.conn.select("contact_submissions"), [])

    def test_non_json_success_body_is_wrapped(self):
        with patch.object(
            self.conn.session,
            "request",
            return_value=_response(200, b"<html>captive portal</html>"),
        ):
            with self.assertRaises(RemoteError) as ctx:
                self.conn.select("contact_submissions")
        self.assertIsNone(ctx.exception.message)
        self.assertEqual(ctx.exception.details, "Invalid response from Supabase")
        self.assertEqual(ctx.exception.status, 200)

    def test_non_list_success_body_is_wrapped(self):
        with patch.object(
            self.conn.session, "request", return_value=_response(200, b'{"a": 1}')
        ):
            with self.assertRaises(RemoteError):
                self.conn.select("contact_submissions")

    def test_postgrest_error_body_is_parsed(self):
        body = (
            b'{"code": "42501", "details": null, "hint": null,'
            b' "message": "permission denied for table contact_submissions"}'
        )
        with patch.object(
            self.conn.session, "request", return_value=_response(401, body)
        ):
            with self.assertRaises(RemoteError) as ctx:
                self.conn.insert("contact_submissions", [{}])
        self.assertEqual(ctx.exception.code, "42501")
        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(
            ctx.exception.message, "permission denied for table contact_submissions"
        )

    def test_non_json_error_body(self):
        with patch.object(
            self.conn.session,
            "request",
            return_value=_response(502, b"Bad gateway", reason="Bad Gateway"),
        ):
            with self.assertRaises(RemoteError) as ctx:
                self.conn.select("contact_submissions")
        self.assertIsNone(ctx.exception.code)
        self.assertEqual(ctx.exception.message, "Bad gateway")

    def test_transport_error_is_wrapped(self):
        with patch.object(
            self.conn.session,
            "request",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            with self.assertRaises(RemoteError) as ctx:
                self.conn.select("contact_submissions")
        self.assertIsNone(ctx.exception.code)
        self.assertIn("connection refused", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()
