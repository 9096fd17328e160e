"""Integration tests for standardized error responses."""

from unittest.mock import patch

import pytest
from django.db import OperationalError

pytestmark = pytest.mark.integration


def _assert_standard_shape(data):
    assert set(data) == {"type", "errors"}
    assert isinstance(data["errors"], list)
    assert data["errors"]
    for error in data["errors"]:
        assert "code" in error
        assert "detail" in error


class TestStandardizedErrors:
    def test_auth_error_has_standard_format(self, api_client):
        response = api_client.get("/api/v1/admin/orders/")
        assert response.status_code == 401
        _assert_standard_shape(response.json())

    def test_malformed_json_has_standard_format(self, api_client):
        response = api_client.post(
            "/api/v1/orders/", data="{", content_type="application/json"
        )
        assert response.status_code == 400
        data = response.json()
        _assert_standard_shape(data)
        assert data["type"] == "client_error"

    def test_validation_error_lists_each_field(self, api_client):
        response = api_client.post("/api/v1/orders/", {}, format="json")
        assert response.status_code == 400
        data = response.json()
        _assert_standard_shape(data)
        assert data["type"] == "validation_error"
        attrs = {error["attr"] for error in data["errors"]}
        assert {"email", "items", "shipping_method", "payment_method"} <= attrs

    def test_domain_error_has_standard_format(self, api_client):
        response = api_client.get("/api/v1/orders/999999/")
        assert response.status_code == 404
        data = response.json()
        _assert_standard_shape(data)
        assert data["errors"][0] == {
            "code": "order_not_found",
            "detail": "Order 999999 not found.",
            "order_id": "999999",
        }

    def test_database_failure_is_retryable_503(self, api_client):
        with patch(
            "modules.orders.services.OrderService.get_order",
            side_effect=OperationalError("database is locked"),
        ):
            response = api_client.get("/api/v1/orders/1/")
        assert response.status_code == 503
        data = response.json()
        _assert_standard_shape(data)
        assert data["type"] == "internal_error"
        assert data["errors"][0]["retryable"] is True
