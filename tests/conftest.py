import pytest

from django.contrib.auth import get_user_model

from rest_framework.test import APIClient

from modules.orders.pricing import PricingPolicy
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def staff_client():
    """APIClient force-authenticated as a staff user."""
    client = APIClient()
    user = User.objects.create_user(username="staff", password="testpass123", is_staff=True)
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def customer_client():
    """APIClient force-authenticated as a non-staff user."""
    client = APIClient()
    user = User.objects.create_user(username="shopper", password="testpass123")
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def make_product():
    """Factory for catalog products (price in centavos)."""
    counter = {"n": 0}

    def _make(name=None, price=10000, stock=10, **extra):
        counter["n"] += 1
        return Product.objects.create(
            sku=extra.pop("sku", f"TEST-{counter['n']:03d}"),
            name=name or f"Test Product {counter['n']}",
            price=price,
            stock=stock,
            **extra,
        )

    return _make


@pytest.fixture()
def pricing_policy():
    return PricingPolicy()


@pytest.fixture()
def order_service(pricing_policy):
    return OrderService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        pricing_policy=pricing_policy,
    )


@pytest.fixture()
def contact_data():
    """Contact and address fields shared by checkout payloads."""
    return {
        "email": "cliente@example.com",
        "phone": "+54 11 4444-5555",
        "first_name": "Juan",
        "last_name": "Pérez",
        "address": "Av. Corrientes 1234",
        "apartment": "Piso 3 B",
        "city": "CABA",
        "province": "Buenos Aires",
        "zip_code": "1043",
    }
