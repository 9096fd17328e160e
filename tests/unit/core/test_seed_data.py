"""Unit tests for the ``seed_data`` management command."""

from __future__ import annotations

from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

from modules.orders.models import Order
from modules.products.models import Product

pytestmark = pytest.mark.unit


def test_seed_creates_users_catalog_and_orders():
    out = StringIO()
    call_command("seed_data", "--orders", "5", stdout=out)

    User = get_user_model()
    assert User.objects.get(username="admin").is_superuser
    assert User.objects.get(username="manager").is_staff
    assert Product.objects.count() == 12
    assert Order.objects.count() == 5
    for order in Order.objects.all():
        assert order.receipt_text
        assert order.total == order.subtotal + order.shipping_cost + order.tax
    assert "Seed completed" in out.getvalue()


def test_seed_is_repeatable():
    call_command("seed_data", "--orders", "3", stdout=StringIO())
    call_command("seed_data", "--orders", "3", stdout=StringIO())

    assert get_user_model().objects.filter(username="admin").count() == 1
    assert Product.objects.count() == 12
    assert Order.objects.count() == 3
