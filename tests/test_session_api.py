"""Identity cookie, login merge and admin endpoints."""

from storefront.core.config import get_settings

settings = get_settings()


def add(client, identity, product_id, quantity=1):
    return client.post(
        "/api/cart/add",
        json={"identity": identity, "productId": str(product_id), "quantity": quantity},
    )


class TestSession:
    def test_first_visit_gets_guest_cookie(self, client):
        response = client.get("/api/session")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["kind"] == "anonymous"
        assert data["identity"].startswith(f"{settings.GUEST_PREFIX}-")
        assert settings.IDENTITY_COOKIE_NAME in response.cookies

    def test_identity_is_stable_across_requests(self, client):
        first = client.get("/api/session").json()["data"]["identity"]
        second = client.get("/api/session").json()["data"]["identity"]
        assert first == second

    def test_login_merges_guest_cart_once(self, client, product, auth_headers):
        guest = client.get("/api/session").json()["data"]["identity"]
        add(client, guest, product.id, quantity=1)
        add(client, "user-123", product.id, quantity=2)

        response = client.post("/api/session/login", headers=auth_headers("user-123"))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["identity"] == "user-123"
        assert data["kind"] == "authenticated"
        assert data["merged"] is True
        assert data["cart"]["lines"][0]["quantity"] == 3

        again = client.post("/api/session/login", headers=auth_headers("user-123")).json()
        assert again["data"]["merged"] is False
        assert again["data"]["cart"]["lines"][0]["quantity"] == 3

        guest_cart = client.get("/api/cart", params={"identity": guest}).json()["data"]
        assert guest_cart["lines"] == []

    def test_login_requires_token(self, client):
        response = client.post("/api/session/login")
        assert response.status_code == 401
        assert response.json()["code"] == "unauthorized"

    def test_login_with_bad_token(self, client):
        response = client.post(
            "/api/session/login", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401

    def test_logout_returns_fresh_guest(self, client, auth_headers):
        client.get("/api/session")
        client.post("/api/session/login", headers=auth_headers("user-123"))

        data = client.post("/api/session/logout").json()["data"]
        assert data["kind"] == "anonymous"

        current = client.get("/api/session").json()["data"]
        assert current["identity"] == data["identity"]


class TestAdmin:
    def _paid_order(self, client, product):
        add(client, "guest-admin", product.id, quantity=2)
        order = client.post("/api/orders", json={"identity": "guest-admin"}).json()["data"]["order"]
        payment = client.post("/api/payments/initiate", json={"orderId": order["id"]}).json()
        client.post(
            "/api/payments/verify",
            json={"paymentId": payment["data"]["payment"]["id"], "success": True},
        )
        return order

    def test_stats_require_admin(self, client, auth_headers):
        assert client.get("/api/admin/stats").status_code == 401
        response = client.get("/api/admin/stats", headers=auth_headers("user-1"))
        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_stats(self, client, product, auth_headers):
        self._paid_order(client, product)
        add(client, "guest-admin", product.id, quantity=1)
        client.post("/api/orders", json={"identity": "guest-admin"})

        response = client.get("/api/admin/stats", headers=auth_headers("boss", role="admin"))
        assert response.status_code == 200
        stats = response.json()["data"]

        assert stats["orders"]["totalOrders"] == 2
        assert stats["orders"]["totalRevenue"] == 300.0
        assert stats["orders"]["averageOrderValue"] == 150.0
        assert stats["orders"]["ordersByStatus"] == {"paid": 1, "pending": 1}

        assert stats["payments"]["totalPayments"] == 1
        assert stats["payments"]["successfulPayments"] == 1
        assert stats["payments"]["totalAmount"] == 200.0
        assert stats["payments"]["successRate"] == 100.0

    def test_order_status_update(self, client, product, auth_headers):
        order = self._paid_order(client, product)
        admin = auth_headers("boss", role="admin")

        response = client.patch(
            f"/api/admin/orders/{order['id']}/status",
            json={"status": "completed"},
            headers=admin,
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "completed"

        response = client.patch(
            f"/api/admin/orders/{order['id']}/status",
            json={"status": "pending"},
            headers=admin,
        )
        assert response.status_code == 409
        assert response.json()["code"] == "invalid_state"
