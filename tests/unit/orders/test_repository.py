"""Unit tests for OrderDjangoRepository.

Covers:
- create: order + items in one call.
- set_receipt: written once only.
- Look-ups: get_by_id, get_for_update, get_by_idempotency_key, list.
- save: domain events published after commit.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from django.db import transaction

from modules.orders.events import OrderStatusChanged
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.repositories.interfaces import IOrderRepository
from shared.infrastructure.bus import event_bus

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo() -> OrderDjangoRepository:
    return OrderDjangoRepository()


@pytest.fixture()
def order_data(contact_data, make_product):
    product = make_product(name="Parlante", price=5000)
    return {
        **contact_data,
        "shipping_method": "pickup",
        "payment_method": "card",
        "subtotal": 10000,
        "shipping_cost": 0,
        "tax": 2100,
        "total": 12100,
        "items": [
            {
                "product_id": product.id,
                "product_name": "Parlante",
                "product_price": 5000,
                "quantity": 2,
            }
        ],
    }


def test_implements_interface(repo):
    assert isinstance(repo, IOrderRepository)


class TestCreate:
    def test_creates_order_with_items(self, repo, order_data):
        order = repo.create(order_data)
        items = list(order.items.all())
        assert order.status == "pending"
        assert [(i.product_name, i.quantity, i.line_total) for i in items] == [
            ("Parlante", 2, 10000)
        ]

    def test_does_not_mutate_input(self, repo, order_data):
        repo.create(order_data)
        assert "items" in order_data


class TestSetReceipt:
    def test_writes_once(self, repo, order_data):
        order = repo.create(order_data)
        repo.set_receipt(order, "RECIBO")
        assert repo.get_by_id(order.id).receipt_text == "RECIBO"

        with pytest.raises(RuntimeError, match="already written"):
            repo.set_receipt(order, "OTRO")
        assert repo.get_by_id(order.id).receipt_text == "RECIBO"


class TestLookups:
    def test_get_by_id(self, repo, order_data):
        order = repo.create(order_data)
        assert repo.get_by_id(order.id) == order

    def test_get_by_id_invalid_or_missing(self, repo):
        assert repo.get_by_id("abc") is None
        assert repo.get_by_id(999999) is None

    def test_get_by_id_skips_soft_deleted(self, repo, order_data):
        order = repo.create(order_data)
        order.delete()
        assert repo.get_by_id(order.id) is None

    def test_get_for_update(self, repo, order_data):
        order = repo.create(order_data)
        with transaction.atomic():
            assert repo.get_for_update(order.id) == order
            assert repo.get_for_update(999999) is None

    def test_get_by_idempotency_key(self, repo, order_data):
        order = repo.create({**order_data, "idempotency_key": "abc-123"})
        assert repo.get_by_idempotency_key("abc-123") == order
        assert repo.get_by_idempotency_key("nope") is None

    def test_get_by_idempotency_key_includes_soft_deleted(self, repo, order_data):
        order = repo.create({**order_data, "idempotency_key": "abc-456"})
        order.delete()
        assert repo.get_by_idempotency_key("abc-456") == order

    def test_list_prefetches_items(self, repo, order_data, django_assert_num_queries):
        repo.create(order_data)
        repo.create(order_data)
        with django_assert_num_queries(2):
            orders = list(repo.list())
            assert all(len(o.items.all()) == 1 for o in orders)


class TestSave:
    def test_events_published_after_commit(
        self, repo, order_data, django_capture_on_commit_callbacks
    ):
        handler = MagicMock()
        event_bus.subscribe(OrderStatusChanged, handler)
        try:
            order = repo.create(order_data)
            order.status = "confirmed"
            event = OrderStatusChanged(
                aggregate_id=order.id, old_status="pending", new_status="confirmed"
            )
            order.add_domain_event(event)

            with django_capture_on_commit_callbacks(execute=True) as callbacks:
                repo.save(order, update_fields=["status"])
                handler.handle.assert_not_called()

            assert len(callbacks) == 1
            handler.handle.assert_called_once_with(event)
            assert order.domain_events == []
        finally:
            event_bus.unsubscribe(OrderStatusChanged, handler)
