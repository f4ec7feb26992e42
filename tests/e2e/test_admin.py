"""
End-to-end: admin dashboard, subscriptions, notifications and health
"""
import pytest

from conftest import create_product, login_shop, register_shop, set_shop_status


@pytest.mark.e2e
class TestSubscriptions:
    def test_repeated_updates_leave_one_subscription(self, client, admin_headers, sql):
        shop_id = register_shop(client)

        for plan, fee in (("premium", 5000), ("basic", 1000)):
            response = client.put(
                f"/api/admin/shops/{shop_id}/subscription",
                json={"plan": plan, "monthly_fee": fee, "status": "active"},
                headers=admin_headers,
            )
            assert response.status_code == 200

        rows = sql("SELECT plan, monthly_fee FROM shop_subscriptions WHERE shop_id = :id", id=shop_id)
        assert [tuple(row) for row in rows] == [("basic", 1000)]

        [shop] = client.get("/api/admin/shops", headers=admin_headers).json()
        assert shop["plan"] == "basic"
        assert shop["monthly_fee"] == 1000

    def test_unknown_plan_is_rejected(self, client, admin_headers):
        shop_id = register_shop(client)
        response = client.put(
            f"/api/admin/shops/{shop_id}/subscription",
            json={"plan": "platinum", "monthly_fee": 10},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_subscription_for_missing_shop(self, client, admin_headers):
        response = client.put(
            "/api/admin/shops/999/subscription", json={"plan": "basic"}, headers=admin_headers
        )
        assert response.status_code == 404


@pytest.mark.e2e
class TestShopAdministration:
    def test_status_update_validation(self, client, admin_headers):
        shop_id = register_shop(client)
        response = client.put(
            f"/api/admin/shops/{shop_id}/status", json={"status": "deleted"}, headers=admin_headers
        )
        assert response.status_code == 422

        response = client.put("/api/admin/shops/999/status", json={"status": "active"}, headers=admin_headers)
        assert response.status_code == 404

    def test_all_shops_listing_includes_pending(self, client, admin_headers):
        register_shop(client, "A1", "a@x.com")
        register_shop(client, "B2", "b@x.com")

        shops = client.get("/api/shops/admin/all", headers=admin_headers).json()
        assert {shop["shop_number"] for shop in shops} == {"A1", "B2"}
        assert all(shop["status"] == "pending" for shop in shops)
        assert all("password" not in shop for shop in shops)

    def test_stats(self, client, admin_headers):
        first = register_shop(client, "A1", "a@x.com")
        register_shop(client, "B2", "b@x.com")
        set_shop_status(client, admin_headers, first, "active")
        headers = login_shop(client)
        product_id = create_product(client, headers)
        client.post(
            "/api/orders",
            json={
                "shop_id": first,
                "product_id": product_id,
                "customer_name": "Jane",
                "customer_contact": "0711111111",
                "size": "8",
            },
        )

        stats = client.get("/api/admin/stats", headers=admin_headers).json()
        assert stats == {"totalShops": 2, "activeShops": 1, "totalProducts": 1, "totalOrders": 1}

    def test_admin_change_password(self, client, admin_headers):
        response = client.put(
            "/api/admin/change-password",
            json={"currentPassword": "admin123", "newPassword": "better-pass"},
            headers=admin_headers,
        )
        assert response.status_code == 200

        login = client.post("/api/admin/login", json={"username": "admin", "password": "better-pass"})
        assert login.status_code == 200
        assert login.json()["admin"]["username"] == "admin"


@pytest.mark.e2e
class TestMisc:
    def test_health_reports_backend(self, client):
        for path in ("/health", "/api/health"):
            response = client.get(path)
            assert response.status_code == 200
            assert response.json() == {"status": "healthy", "database": "embedded"}

    def test_vapid_key(self, client):
        assert client.get("/api/notifications/vapid-key").json() == {"publicKey": "test-vapid-public-key"}

    def test_subscribe_replaces_previous_subscription(self, client, admin_headers, sql):
        shop_id = register_shop(client)
        headers = login_shop(client)
        for endpoint in ("https://push.example/1", "https://push.example/2"):
            response = client.post(
                "/api/notifications/subscribe", json={"subscription": {"endpoint": endpoint}}, headers=headers
            )
            assert response.status_code == 200

        rows = sql("SELECT subscription_data FROM push_subscriptions WHERE shop_id = :id", id=shop_id)
        assert len(rows) == 1
        assert "push.example/2" in rows[0][0]

    def test_default_admin_is_seeded_once(self, client, sql):
        rows = sql("SELECT username FROM admins")
        assert [row[0] for row in rows] == ["admin"]
