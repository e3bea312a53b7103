import json
import unittest
from datetime import date

import requests

from bizsuite.models.employees import Employee, EmployeesFilterParams
from bizsuite.services.credentials import StaticTokenProvider
from bizsuite.services.errors import (
    ApiError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    ServerError,
    TransportError,
    UnauthorizedError,
)
from bizsuite.services.http_client import PortalHttpClient, PortalHttpClientConfig, encode_params


class _Resp:
    def __init__(self, status_code: int, payload=None, *, raw: bytes | None = None):
        self.status_code = status_code
        self._payload = payload
        if raw is not None:
            self.content = raw
        elif payload is None:
            self.content = b""
        else:
            self.content = json.dumps(payload).encode("utf-8")
        self.text = self.content.decode("utf-8", errors="replace")

    def json(self):
        return json.loads(self.content.decode("utf-8"))


class _FakeSession:
    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        resp = self._responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def _client(session, token="tok-123456789"):
    return PortalHttpClient(
        PortalHttpClientConfig(base_url="http://api.example.test/", timeout_s=7.5),
        credentials=StaticTokenProvider(token),
        session=session,
    )


class TestPortalHttpClientUnit(unittest.TestCase):
    def test_bearer_header_base_url_and_timeout(self):
        session = _FakeSession(_Resp(200, [{"id": "1", "employeeName": "A"}]))
        data = _client(session).get_json("/api/employees", params={"companyId": "c1"})

        method, url, kwargs = session.calls[0]
        self.assertEqual(method, "GET")
        self.assertEqual(url, "http://api.example.test/api/employees")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok-123456789")
        self.assertEqual(kwargs["params"], {"companyId": "c1"})
        self.assertEqual(kwargs["timeout"], 7.5)
        self.assertEqual(data[0]["employeeName"], "A")

    def test_no_token_means_no_authorization_header(self):
        session = _FakeSession(_Resp(200, {}))
        _client(session, token=None).get_json("/api/employees")
        self.assertNotIn("Authorization", session.calls[0][2]["headers"])

    def test_token_is_read_on_every_request(self):
        class _Rotating:
            def __init__(self):
                self.tokens = iter(["first", "second"])

            def load_token(self):
                return next(self.tokens)

        session = _FakeSession(_Resp(200, {}), _Resp(200, {}))
        http = PortalHttpClient(PortalHttpClientConfig(base_url="http://x"), credentials=_Rotating(), session=session)
        http.get_json("/a")
        http.get_json("/b")
        self.assertEqual(session.calls[0][2]["headers"]["Authorization"], "Bearer first")
        self.assertEqual(session.calls[1][2]["headers"]["Authorization"], "Bearer second")

    def test_encode_params(self):
        params = EmployeesFilterParams(
            page_number=2, page_size=25, sort_descending=True, company_id="c1", status=None, department="Ops"
        )
        self.assertEqual(
            encode_params(params),
            {"pageNumber": 2, "pageSize": 25, "sortDescending": "true", "companyId": "c1", "department": "Ops"},
        )
        self.assertEqual(
            encode_params({"fromDate": date(2024, 4, 1), "flag": False, "skip": None}),
            {"fromDate": "2024-04-01", "flag": "false"},
        )
        self.assertEqual(encode_params(None), {})

    def test_status_errors_map_to_exception_types(self):
        cases = [
            (400, BadRequestError),
            (401, UnauthorizedError),
            (404, NotFoundError),
            (409, ConflictError),
            (422, BadRequestError),
            (503, ServerError),
            (418, ApiError),
        ]
        for status, exc_type in cases:
            with self.subTest(status=status):
                session = _FakeSession(_Resp(status, {"type": "X", "message": "nope", "errors": ["a: b"]}))
                with self.assertRaises(exc_type) as ctx:
                    _client(session).get_json("/api/x")
                self.assertEqual(ctx.exception.status_code, status)
                self.assertEqual(ctx.exception.message, "nope")
                self.assertEqual(ctx.exception.details, ["a: b"])
                self.assertEqual(ctx.exception.error_type, "X")

    def test_error_without_json_body_uses_text(self):
        session = _FakeSession(_Resp(502, raw=b"Bad Gateway"))
        with self.assertRaises(ServerError) as ctx:
            _client(session).get_json("/api/x")
        self.assertEqual(ctx.exception.message, "Bad Gateway")
        self.assertEqual(str(ctx.exception), "HTTP 502: Bad Gateway")

    def test_transport_failure(self):
        session = _FakeSession(requests.ConnectionError("refused"))
        with self.assertRaises(TransportError) as ctx:
            _client(session).get_json("/api/x")
        self.assertIsNone(ctx.exception.status_code)
        self.assertIn("refused", str(ctx.exception))

    def test_no_content_returns_none(self):
        session = _FakeSession(_Resp(204), _Resp(200))
        self.assertIsNone(_client(session).put_json("/api/x/1", body={"a": 1}))
        self.assertIsNone(_client(session).delete_json("/api/x/1"))

    def test_body_models_are_sent_by_alias_without_none(self):
        session = _FakeSession(_Resp(201, {"ok": True}))
        _client(session).post_json("/api/x", body=EmployeesFilterParams(page_number=1, employee_name="A"))
        self.assertEqual(session.calls[0][2]["json"], {"pageNumber": 1, "employeeName": "A"})

    def test_get_paged_validates_items(self):
        payload = {
            "items": [{"id": "1", "employeeName": "A"}],
            "totalCount": 11,
            "pageNumber": 2,
            "pageSize": 10,
            "totalPages": 2,
        }
        page = _client(_FakeSession(_Resp(200, payload))).get_paged("/api/employees/paged", {"pageNumber": 2}, Employee)
        self.assertIsInstance(page.items[0], Employee)
        self.assertEqual(page.total_count, 11)
        self.assertTrue(page.has_previous_page)
        self.assertFalse(page.has_next_page)

    def test_get_bytes_and_multipart(self):
        session = _FakeSession(_Resp(200, raw=b"a,b\n1,2\n"), _Resp(201, {"id": "f1"}))
        http = _client(session)
        self.assertEqual(http.get_bytes("/api/audit-trail/export"), b"a,b\n1,2\n")
        http.post_multipart("/api/files/upload", files={"file": ("a.txt", b"x", "text/plain")}, data={"entityId": None})
        kwargs = session.calls[1][2]
        self.assertEqual(kwargs["files"], {"file": ("a.txt", b"x", "text/plain")})
        self.assertIsNone(kwargs["data"])

    def test_coerce_list(self):
        http = _client(_FakeSession())
        self.assertEqual(http.coerce_list(None, context="x"), [])
        self.assertEqual(http.coerce_list([{"a": 1}, "junk"], context="x"), [{"a": 1}])
        with self.assertLogs("bizsuite.services.http_client", level="ERROR"):
            self.assertEqual(http.coerce_list({"a": 1}, context="x"), [])


if __name__ == "__main__":
    unittest.main()
