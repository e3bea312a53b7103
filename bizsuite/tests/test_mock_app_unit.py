import unittest

from fastapi.testclient import TestClient

from bizsuite.app.main import create_app
from bizsuite.models.products import CreateProductDto
from bizsuite.services.resources import ProductService
from bizsuite.tests._support import TEST_TOKEN, MockApiTestCase
from bizsuite.tests._util_tempdir import cleanup_dir, make_temp_dir


class TestMockAppUnit(MockApiTestCase):
    def test_health_and_root(self):
        self.assertEqual(self.client.get("/health").json()["status"], "ok")
        self.assertIn("version", self.client.get("/").json())

    def test_error_body_shape(self):
        resp = self.client.get("/api/employees/missing", headers={"Authorization": f"Bearer {TEST_TOKEN}"})
        self.assertEqual(resp.status_code, 404)
        body = resp.json()
        self.assertEqual(body["type"], "NotFound")
        self.assertIn("missing", body["message"])

    def test_missing_token_is_401_not_422(self):
        resp = self.client.get("/api/products")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["type"], "Unauthorized")

    def test_invalid_json_body_is_400(self):
        resp = self.client.post(
            "/api/products",
            content=b"{broken",
            headers={"Authorization": f"Bearer {TEST_TOKEN}", "Content-Type": "application/json"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["type"], "Validation")

    def test_data_survives_app_restart(self):
        created = self.services.products.create(CreateProductDto(name="Durable", company_id="c1"))
        app = create_app(data_dir=self.data_dir, tokens={TEST_TOKEN: "Test Admin"})
        with TestClient(app) as other:
            service = ProductService(self.make_http(session=other))
            self.assertEqual(service.get_by_id(created.id).name, "Durable")


class TestMockAppWithoutAuthUnit(unittest.TestCase):
    def test_requests_without_token_are_accepted(self):
        td = make_temp_dir(prefix="bizsuite_noauth")
        try:
            with TestClient(create_app(data_dir=td, require_auth=False)) as client:
                resp = client.post("/api/products", json={"name": "Open", "companyId": "c1"})
                self.assertEqual(resp.status_code, 201)
                self.assertEqual(client.get("/api/products").json()[0]["name"], "Open")
                entries = client.get("/api/audit-trail").json()
                self.assertIsNone(entries[0]["actorName"])
        finally:
            cleanup_dir(td)


if __name__ == "__main__":
    unittest.main()
