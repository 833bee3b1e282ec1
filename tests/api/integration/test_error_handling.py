"""Integration tests for mapping domain and request errors to HTTP responses."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.exceptions import (
    ExpectedVersionError,
    InvalidOperationError,
    InvalidStateError,
    ObjectNotFoundError,
    ValidationError,
)

from storefront.api.errors import register_error_handlers
from storefront.exceptions import InsufficientStockError, ProductUnavailableError


@pytest.fixture()
def client():
    app = FastAPI()

    @app.get("/not-found")
    async def not_found():
        raise ObjectNotFoundError({"order": ["Order not found"]})

    @app.get("/unavailable")
    async def unavailable():
        raise ProductUnavailableError({"product_id": ["Product not available"]})

    @app.get("/invalid")
    async def invalid():
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})

    @app.get("/out-of-stock")
    async def out_of_stock():
        raise InsufficientStockError({"quantity": ["Insufficient stock for Gold Ring. Only 1 available"]})

    @app.get("/conflict")
    async def conflict():
        raise ExpectedVersionError("Wrong expected version: 1 (Aggregate: ShoppingCart, Version: 2)")

    @app.get("/invalid-state")
    async def invalid_state():
        raise InvalidStateError({"order": ["Order is already shipped"]})

    @app.get("/forbidden-operation")
    async def forbidden_operation():
        raise InvalidOperationError("Products cannot be deleted")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("database exploded")

    @app.get("/typed")
    async def typed(page: int):
        return {"page": page}

    register_error_handlers(app)
    return TestClient(app, raise_server_exceptions=False)


class TestDomainErrors:
    def test_not_found(self, client):
        response = client.get("/not-found")
        assert response.status_code == 404
        assert response.json() == {"errors": {"order": ["Order not found"]}, "errorType": "ObjectNotFoundError"}

    def test_unavailable_product_is_not_found(self, client):
        response = client.get("/unavailable")
        assert response.status_code == 404
        assert response.json()["errorType"] == "ProductUnavailableError"

    def test_validation_error(self, client):
        response = client.get("/invalid")
        assert response.status_code == 400
        assert response.json() == {
            "errors": {"quantity": ["Quantity must be at least 1"]},
            "errorType": "ValidationError",
        }

    def test_insufficient_stock(self, client):
        response = client.get("/out-of-stock")
        assert response.status_code == 400
        assert response.json()["errorType"] == "InsufficientStockError"

    def test_version_conflict(self, client):
        response = client.get("/conflict")
        assert response.status_code == 409
        assert response.json()["errorType"] == "ExpectedVersionError"
        assert "_entity" in response.json()["errors"]

    def test_invalid_state_keeps_field_messages(self, client):
        response = client.get("/invalid-state")
        assert response.status_code == 409
        assert response.json() == {"errors": {"order": ["Order is already shipped"]}, "errorType": "InvalidStateError"}

    def test_invalid_operation(self, client):
        response = client.get("/forbidden-operation")
        assert response.status_code == 422
        assert response.json() == {
            "errors": {"_entity": ["Products cannot be deleted"]},
            "errorType": "InvalidOperationError",
        }


class TestRequestErrors:
    def test_bad_query_parameter(self, client):
        response = client.get("/typed", params={"page": "first"})
        assert response.status_code == 400
        body = response.json()
        assert body["errorType"] == "ValidationError"
        assert "page" in body["errors"]

    def test_unexpected_error_hides_internals(self, client):
        response = client.get("/boom")
        assert response.status_code == 500
        assert response.json() == {"errors": {"server": ["Internal server error"]}, "errorType": "InternalServerError"}
        assert "exploded" not in response.text
