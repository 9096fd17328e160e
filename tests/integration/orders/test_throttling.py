"""Integration tests for throttling on the order API."""

from __future__ import annotations

import pytest
from django.core.cache import cache
from rest_framework.throttling import ScopedRateThrottle

pytestmark = pytest.mark.integration


@pytest.fixture()
def strict_rates(monkeypatch):
    monkeypatch.setattr(
        ScopedRateThrottle,
        "THROTTLE_RATES",
        {"order_creation": "3/minute", "order_listing": "100/minute"},
    )
    cache.clear()
    yield
    cache.clear()


def test_order_creation_is_throttled(strict_rates, api_client, contact_data, make_product):
    product = make_product(stock=100)
    payload = {
        **contact_data,
        "shipping_method": "pickup",
        "payment_method": "card",
        "items": [{"product_id": product.id, "quantity": 1}],
    }

    for _ in range(3):
        response = api_client.post("/api/v1/orders/", payload, format="json")
        assert response.status_code == 201

    response = api_client.post("/api/v1/orders/", payload, format="json")
    assert response.status_code == 429
    assert response.json()["type"] == "client_error"


def test_order_lookup_has_higher_limit(strict_rates, api_client):
    for _ in range(5):
        response = api_client.get("/api/v1/orders/424242/")
        assert response.status_code == 404
