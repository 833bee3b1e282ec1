"""Integration tests for Order API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain

from storefront.api.errors import register_error_handlers
from storefront.api.routes import cart_router, order_router
from storefront.catalogue.product import Product

SESSION_HEADERS = {"session-id": "sess-order-api-001"}

CUSTOMER = {"name": "Ayesha Khan", "email": "ayesha@example.com", "phone": "+92 300 1234567"}
ADDRESS = {"street": "12 Mall Road", "city": "Lahore", "state": "Punjab", "zipCode": "54000"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def product():
    product = Product.create(
        name="Gold Ring",
        description="A classic gold ring.",
        price=1000,
        category="rings",
        material="Gold",
        stock=5,
    )
    current_domain.repository_for(Product).add(product)
    return product


def _order_body(product_id, quantity=2, **extra):
    return {
        "customer": CUSTOMER,
        "shippingAddress": ADDRESS,
        "items": [{"productId": str(product_id), "quantity": quantity, "price": 1000}],
        **extra,
    }


def _create_order(client, product_id, quantity=2, **extra):
    response = client.post("/orders", json=_order_body(product_id, quantity, **extra), headers=SESSION_HEADERS)
    assert response.status_code == 201
    return response.json()


class TestCreateOrderEndpoint:
    def test_create_order(self, client, product):
        data = _create_order(client, product.id, paymentIntentId="pi_123")

        assert data["status"] == "pending"
        assert data["orderNumber"].startswith("ORD-")
        assert data["customer"]["email"] == "ayesha@example.com"
        assert data["shippingAddress"]["zipCode"] == "54000"
        assert data["shippingAddress"]["country"] == "Pakistan"
        assert data["paymentIntentId"] == "pi_123"
        assert data["currency"] == "pkr"
        assert (data["subtotal"], data["shipping"], data["discount"], data["total"]) == (2000, 200, 0, 2200)
        assert data["items"][0]["quantity"] == 2

        assert current_domain.repository_for(Product).get(product.id).stock == 3

    def test_create_order_with_coupon(self, client, product):
        data = _create_order(client, product.id, couponCode="FREESHIP")
        assert data["couponCode"] == "FREESHIP"
        assert data["total"] == 2000

    def test_insufficient_stock(self, client, product):
        response = client.post("/orders", json=_order_body(product.id, 6), headers=SESSION_HEADERS)
        assert response.status_code == 400
        assert response.json()["errorType"] == "InsufficientStockError"
        assert current_domain.repository_for(Product).get(product.id).stock == 5

    def test_unknown_product(self, client):
        response = client.post("/orders", json=_order_body("missing"), headers=SESSION_HEADERS)
        assert response.status_code == 404

    def test_no_items(self, client):
        body = {"customer": CUSTOMER, "shippingAddress": ADDRESS, "items": []}
        response = client.post("/orders", json=body, headers=SESSION_HEADERS)
        assert response.status_code == 400

    def test_missing_address(self, client, product):
        body = _order_body(product.id)
        del body["shippingAddress"]
        response = client.post("/orders", json=body, headers=SESSION_HEADERS)
        assert response.status_code == 400
        assert "shippingAddress" in response.json()["errors"]

    def test_order_clears_session_cart(self, client, product):
        client.post("/cart/add", json={"productId": str(product.id), "quantity": 2}, headers=SESSION_HEADERS)
        _create_order(client, product.id)

        cart = client.get("/cart", headers=SESSION_HEADERS).json()
        assert cart["items"] == []
        assert cart["total"] == 0

    def test_order_can_keep_session_cart(self, client, product):
        client.post("/cart/add", json={"productId": str(product.id), "quantity": 1}, headers=SESSION_HEADERS)
        _create_order(client, product.id, quantity=1, clearCart=False)

        cart = client.get("/cart", headers=SESSION_HEADERS).json()
        assert len(cart["items"]) == 1


class TestGetOrderEndpoint:
    def test_get_order(self, client, product):
        created = _create_order(client, product.id)
        response = client.get(f"/orders/{created['id']}")
        assert response.status_code == 200
        assert response.json()["orderNumber"] == created["orderNumber"]

    def test_get_unknown_order(self, client):
        response = client.get("/orders/missing")
        assert response.status_code == 404


class TestUpdateStatusEndpoint:
    def test_ship_order(self, client, product):
        created = _create_order(client, product.id)
        client.put(f"/orders/{created['id']}/status", json={"status": "processing"})

        response = client.put(
            f"/orders/{created['id']}/status",
            json={"status": "shipped", "trackingNumber": "TRK-123", "estimatedDelivery": "2026-11-01T00:00:00Z"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "shipped"
        assert data["trackingNumber"] == "TRK-123"
        assert data["shippedAt"] is not None
        assert data["estimatedDelivery"].startswith("2026-11-01")

    def test_invalid_transition(self, client, product):
        created = _create_order(client, product.id)
        response = client.put(f"/orders/{created['id']}/status", json={"status": "delivered"})
        assert response.status_code == 400
        assert "status" in response.json()["errors"]

    def test_unknown_status(self, client, product):
        created = _create_order(client, product.id)
        response = client.put(f"/orders/{created['id']}/status", json={"status": "lost"})
        assert response.status_code == 400
