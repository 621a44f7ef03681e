"""HTTP-level tests: routing, envelope, status codes."""

import uuid

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from storefront.main import app
from storefront.routers import cart as cart_router

GUEST = "guest-api"


def add(client, product_id, identity=GUEST, **extra):
    return client.post(
        "/api/cart/add",
        json={"identity": identity, "productId": str(product_id), **extra},
    )


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestCartEndpoints:
    def test_get_creates_empty_cart(self, client):
        response = client.get("/api/cart", params={"identity": GUEST})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["lines"] == []
        assert body["data"]["cart"]["ownerIdentity"] == GUEST

    def test_add_update_remove(self, client, product):
        body = add(client, product.id, quantity=2).json()
        line = body["data"]["lines"][0]
        assert line["quantity"] == 2
        assert line["unitPrice"] == 100.0
        assert line["totalPrice"] == 200.0
        assert line["productTitle"] == "Chocolate Truffle"

        response = client.patch(
            "/api/cart/item",
            json={"identity": GUEST, "lineId": line["id"], "quantity": 4},
        )
        assert response.status_code == 200
        assert response.json()["data"]["lines"][0]["totalPrice"] == 400.0

        response = client.request(
            "DELETE",
            "/api/cart/item",
            json={"identity": GUEST, "lineId": line["id"]},
        )
        assert response.status_code == 200
        assert response.json()["data"]["lines"] == []

    def test_add_with_variant(self, client, product, variant):
        body = add(client, product.id, variantId=str(variant.id)).json()
        line = body["data"]["lines"][0]
        assert line["variantId"] == str(variant.id)
        assert line["unitPrice"] == 180.0
        assert line["variantLabel"] == "1 kg"

    def test_clear(self, client, product):
        add(client, product.id)
        response = client.delete("/api/cart", params={"identity": GUEST})
        assert response.status_code == 200
        assert response.json()["data"]["lines"] == []

    def test_merge(self, client, product):
        add(client, product.id, identity=GUEST, quantity=1)
        add(client, product.id, identity="user-7", quantity=2)

        response = client.post(
            "/api/cart/merge",
            json={"fromIdentity": GUEST, "toIdentity": "user-7"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["lines"][0]["quantity"] == 3


class TestValidationAndNotFound:
    def test_missing_identity_is_400(self, client):
        response = client.get("/api/cart")
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "validation_error"

    def test_missing_product_id_is_400(self, client):
        response = client.post("/api/cart/add", json={"identity": GUEST})
        assert response.status_code == 400

    def test_blank_identity_is_400(self, client, product):
        response = add(client, product.id, identity="   ")
        assert response.status_code == 400

    def test_unknown_product_is_404(self, client):
        response = add(client, uuid.uuid4())
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_unknown_line_is_404(self, client):
        response = client.patch(
            "/api/cart/item",
            json={"identity": GUEST, "lineId": str(uuid.uuid4()), "quantity": 1},
        )
        assert response.status_code == 404

    def test_unknown_order_is_404(self, client):
        response = client.get(f"/api/orders/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_unknown_payment_is_404(self, client):
        response = client.post(
            "/api/payments/verify",
            json={"paymentId": str(uuid.uuid4()), "success": True},
        )
        assert response.status_code == 404


class TestCheckoutFlow:
    def test_order_and_payment(self, client, product, other_product):
        add(client, product.id, quantity=2)
        add(client, other_product.id, quantity=1)

        response = client.post("/api/orders", json={"identity": GUEST})
        assert response.status_code == 201
        order = response.json()["data"]["order"]
        assert order["totalAmount"] == 250.0
        assert order["status"] == "pending"
        assert len(order["items"]) == 2

        cart = client.get("/api/cart", params={"identity": GUEST}).json()["data"]
        assert cart["lines"] == []

        orders = client.get("/api/orders", params={"identity": GUEST}).json()["data"]["orders"]
        assert [o["id"] for o in orders] == [order["id"]]

        response = client.post("/api/payments/initiate", json={"orderId": order["id"]})
        assert response.status_code == 201
        payment = response.json()["data"]["payment"]
        assert payment["amount"] == 250.0
        assert payment["status"] == "pending"
        assert payment["upiUrl"].startswith("upi://pay?")

        response = client.post(
            "/api/payments/verify",
            json={"paymentId": payment["id"], "success": True},
        )
        assert response.json()["data"]["payment"]["status"] == "success"

        latest = client.get("/api/payments", params={"orderId": order["id"]}).json()
        assert latest["data"]["payment"]["id"] == payment["id"]

        fetched = client.get(f"/api/orders/{order['id']}", params={"identity": GUEST})
        assert fetched.json()["data"]["order"]["status"] == "paid"

    def test_empty_cart_checkout(self, client):
        response = client.post("/api/orders", json={"identity": GUEST})
        assert response.status_code == 400
        assert response.json()["code"] == "empty_cart"

    def test_order_of_other_identity_is_hidden(self, client, product):
        add(client, product.id)
        order = client.post("/api/orders", json={"identity": GUEST}).json()["data"]["order"]

        response = client.get(f"/api/orders/{order['id']}", params={"identity": "guest-x"})
        assert response.status_code == 404


class TestCatalogPrice:
    def test_quote(self, client, product):
        response = client.get(f"/api/catalog/products/{product.id}/price")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data == {"unitPrice": 100.0, "referencePrice": 125.0, "discountPercent": 20}

    def test_quote_for_variant(self, client, product, variant):
        response = client.get(
            f"/api/catalog/products/{product.id}/price",
            params={"variantId": str(variant.id)},
        )
        assert response.json()["data"]["discountPercent"] == 10

    def test_unknown_product(self, client):
        response = client.get(f"/api/catalog/products/{uuid.uuid4()}/price")
        assert response.status_code == 404


class TestStorageFailure:
    def test_database_down_is_503_degraded(self, client, monkeypatch):
        def unavailable(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr(cart_router.cart_repo, "get_by_owner", unavailable)

        response = client.get("/api/cart", params={"identity": GUEST})
        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "storage_unavailable"
        assert body["degraded"] is True

    def test_unexpected_error_is_500(self, session, monkeypatch):
        from storefront.database import get_session

        def _get_session_override():
            yield session

        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(cart_router.cart_repo, "get_by_owner", boom)
        app.dependency_overrides[get_session] = _get_session_override
        try:
            client = TestClient(app, raise_server_exceptions=False)
            response = client.get("/api/cart", params={"identity": GUEST})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Internal server error",
            "code": "internal_error",
        }
