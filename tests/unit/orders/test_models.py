"""Unit tests for the Order and OrderItem models.

Covers:
- order_number zero padding.
- Default status and blank receipt.
- total == subtotal + shipping_cost + tax (database check constraint).
- OrderItem line_total computed on save; quantity >= 1.
- Nullable unique idempotency key.
"""

from __future__ import annotations

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem

pytestmark = pytest.mark.unit


@pytest.fixture()
def order_fields(contact_data):
    return {
        **contact_data,
        "shipping_method": "standard",
        "payment_method": "transfer",
        "subtotal": 20000,
        "shipping_cost": 300000,
        "tax": 4200,
        "total": 324200,
    }


class TestOrder:
    def test_defaults(self, order_fields):
        order = Order.objects.create(**order_fields)
        assert order.status == OrderStatus.PENDING
        assert order.receipt_text == ""
        assert order.idempotency_key is None

    def test_order_number_is_zero_padded_id(self, order_fields):
        order = Order.objects.create(**order_fields)
        assert order.order_number == str(order.id).zfill(6)
        assert len(order.order_number) >= 6
        assert Order(**order_fields).order_number == ""

    def test_full_name_and_str(self, order_fields):
        order = Order.objects.create(**order_fields)
        assert order.full_name == "Juan Pérez"
        assert str(order) == f"#{order.order_number} (pending)"

    def test_total_must_match_components(self, order_fields):
        order_fields["total"] = 1
        with pytest.raises(IntegrityError), transaction.atomic():
            Order.objects.create(**order_fields)

    def test_idempotency_key_is_unique(self, order_fields):
        Order.objects.create(idempotency_key="k-1", **order_fields)
        with pytest.raises(IntegrityError), transaction.atomic():
            Order.objects.create(idempotency_key="k-1", **order_fields)

    def test_many_orders_without_idempotency_key(self, order_fields):
        Order.objects.create(**order_fields)
        Order.objects.create(**order_fields)
        assert Order.objects.filter(idempotency_key__isnull=True).count() == 2


class TestOrderItem:
    def test_line_total_computed_on_save(self, order_fields, make_product):
        order = Order.objects.create(**order_fields)
        product = make_product(price=10000)
        item = OrderItem.objects.create(
            order=order,
            product=product,
            product_name=product.name,
            product_price=10000,
            quantity=2,
        )
        assert item.line_total == 20000

    def test_quantity_must_be_positive(self, order_fields, make_product):
        order = Order.objects.create(**order_fields)
        product = make_product()
        item = OrderItem(
            order=order,
            product=product,
            product_name=product.name,
            product_price=100,
            quantity=0,
            line_total=0,
        )
        with pytest.raises(ValidationError) as exc_info:
            item.full_clean()
        assert "quantity" in exc_info.value.message_dict
