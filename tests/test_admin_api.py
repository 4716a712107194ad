import json
import tempfile
import unittest

from fastapi.testclient import TestClient

from tourdesk.security import new_credential
from tourdesk.storage import JsonFileStore

from tests.helpers import make_app, make_settings

ADMIN_EMAIL = "admin@tours.lk"
ADMIN_PASSWORD = "admin-secret"


class AdminAPITestCase(unittest.TestCase):
    settings_overrides = {}

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = JsonFileStore(self.tmp.name)
        self.settings = make_settings(self.tmp.name, **self.settings_overrides)
        self.store.insert("users", {
            "id": "admin-1",
            "name": "Admin",
            "email": ADMIN_EMAIL,
            "role": "admin",
            "status": "active",
            **new_credential(ADMIN_PASSWORD),
        })
        self.store.insert("users", {
            "id": "customer-1",
            "name": "Customer",
            "email": "customer@tours.lk",
            "role": "customer",
            "status": "active",
            **new_credential("customer-secret"),
        })
        self.app = make_app(self.settings, self.store)
        self.client = TestClient(self.app)

    def tearDown(self):
        self.tmp.cleanup()

    def login(self, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
        return self.client.post("/api/auth/login", json={"email": email, "password": password})


class TestAuthAPI(AdminAPITestCase):
    settings_overrides = {"LOGIN_RATE_LIMIT": 2}

    def test_login_sets_session_cookie(self):
        res = self.login()
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["user"]["role"], "admin")
        self.assertNotIn("password_hash", res.json()["user"])
        self.assertIn("admin_session", self.client.cookies)
        self.assertIn("httponly", res.headers["set-cookie"].lower())

        me = self.client.get("/api/auth/me")
        self.assertEqual(me.json()["user"]["id"], "admin-1")

    def test_wrong_password(self):
        res = self.login(password="nope")
        self.assertEqual(res.status_code, 401)
        self.assertNotIn("admin_session", self.client.cookies)

    def test_rate_limited(self):
        self.login(password="nope")
        self.login(password="nope")
        res = self.login(password="nope")
        self.assertEqual(res.status_code, 429)
        self.assertIn("retry-after", res.headers)

    def test_forwarded_header_does_not_reset_limit(self):
        for i in range(2):
            self.client.post(
                "/api/auth/login",
                json={"email": ADMIN_EMAIL, "password": "nope"},
                headers={"X-Forwarded-For": f"203.0.113.{i}"},
            )
        res = self.client.post(
            "/api/auth/login",
            json={"email": ADMIN_EMAIL, "password": "nope"},
            headers={"X-Forwarded-For": "203.0.113.99"},
        )
        self.assertEqual(res.status_code, 429)

    def test_logout(self):
        self.login()
        self.client.post("/api/auth/logout")
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

    def test_register(self):
        res = self.client.post("/api/auth/register", json={
            "name": "Kamal", "email": "kamal@tours.lk", "password": "secret123",
        })
        self.assertEqual(res.status_code, 201, res.text)
        self.assertEqual(res.json()["user"]["role"], "customer")

    def test_update_password_requires_admin(self):
        body = {"email": "customer@tours.lk", "password": "changed-secret"}
        self.assertEqual(self.client.post("/api/users/update-password", json=body).status_code, 401)

        self.login(email="customer@tours.lk", password="customer-secret")
        self.assertEqual(self.client.post("/api/users/update-password", json=body).status_code, 403)

        self.login()
        self.assertEqual(self.client.post("/api/users/update-password", json=body).status_code, 200)
        self.client.post("/api/auth/logout")
        self.assertEqual(self.login(email="customer@tours.lk", password="changed-secret").status_code, 200)


class TestLoginBehindProxy(AdminAPITestCase):
    settings_overrides = {"LOGIN_RATE_LIMIT": 1, "TRUSTED_PROXIES": ["testclient"]}

    def _login_from(self, forwarded):
        return self.client.post(
            "/api/auth/login",
            json={"email": ADMIN_EMAIL, "password": "nope"},
            headers={"X-Forwarded-For": forwarded},
        )

    def test_clients_behind_trusted_proxy_limited_separately(self):
        self.assertEqual(self._login_from("198.51.100.7").status_code, 401)
        self.assertEqual(self._login_from("198.51.100.7").status_code, 429)
        self.assertEqual(self._login_from("198.51.100.8").status_code, 401)

    def test_spoofed_leftmost_hop_ignored(self):
        self._login_from("198.51.100.7")
        res = self._login_from("10.9.9.9, 198.51.100.7")
        self.assertEqual(res.status_code, 429)


class TestBookingsAPI(AdminAPITestCase):
    def test_admin_routes_need_session(self):
        self.assertEqual(self.client.get("/api/bookings").status_code, 401)
        self.login(email="customer@tours.lk", password="customer-secret")
        self.assertEqual(self.client.get("/api/bookings").status_code, 403)

    def test_crud(self):
        created = self.client.post("/api/bookings", json={
            "tour_package_id": "t1",
            "tour_package_name": "Hill Country",
            "customer_name": "Nimal",
            "customer_email": "nimal@tours.lk",
        }).json()["data"]
        self.assertEqual(created["id"], "B001")
        self.assertEqual(self.client.get("/api/bookings/B001").json()["data"]["status"], "pending")

        self.login()
        self.assertEqual(self.client.get("/api/bookings").json()["count"], 1)
        updated = self.client.put("/api/bookings/B001", json={"guests": 4, "status": "completed"})
        self.assertEqual(updated.json()["data"]["guests"], 4)
        self.assertEqual(self.client.put("/api/bookings/B001", json={"status": "paid"}).status_code, 422)
        self.assertEqual(self.client.delete("/api/bookings/B001").status_code, 200)
        self.assertEqual(self.client.get("/api/bookings/B001").status_code, 404)


class TestSettingsAPI(AdminAPITestCase):
    def _payload(self, **overrides):
        data = {
            "siteName": "Lanka Tours",
            "payhereMerchantId": "1221149",
            "payhereMerchantSecret": "mySecret",
            "payhereSandbox": True,
            "payhereBaseUrl": "https://tours.example.lk",
        }
        data.update(overrides)
        return data

    def test_requires_admin(self):
        self.assertEqual(self.client.get("/api/settings").status_code, 401)

    def test_secret_is_masked(self):
        self.login()
        res = self.client.put("/api/settings", json=self._payload())
        self.assertEqual(res.status_code, 200, res.text)
        data = self.client.get("/api/settings").json()["data"]
        self.assertNotIn("payhereMerchantSecret", data)
        self.assertTrue(data["payhereMerchantSecretSet"])
        self.assertEqual(data["siteName"], "Lanka Tours")

    def test_saved_settings_feed_checkout(self):
        self.login()
        # resolve once with nothing configured so the cache is exercised
        body = {
            "bookingId": "B001", "amount": 100, "customerName": "Nimal",
            "customerEmail": "nimal@tours.lk", "tourName": "Kandy",
        }
        self.assertEqual(self.client.post("/api/payments/checkout", json=body).status_code, 500)

        self.client.put("/api/settings", json=self._payload())
        res = self.client.post("/api/payments/checkout", json=body)
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["data"]["formData"]["merchant_id"], "1221149")

        with open(self.settings.SETTINGS_FILE, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["payhereMerchantId"], "1221149")

    def test_empty_secret_keeps_existing(self):
        self.login()
        self.client.put("/api/settings", json=self._payload())
        self.client.put("/api/settings", json=self._payload(payhereMerchantSecret="", siteName="Renamed"))
        row = self.store.get("settings", "main")
        self.assertEqual(row["payhere_merchant_secret"], "mySecret")
        self.assertEqual(row["site_name"], "Renamed")


class TestHealth(AdminAPITestCase):
    def test_health(self):
        res = self.client.get("/health")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "ok")
        self.assertIn("x-request-id", res.headers)


if __name__ == "__main__":
    unittest.main()
