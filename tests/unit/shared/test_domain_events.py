"""Unit tests for domain events and the in-memory bus.

Covers:
- Event collection on the Order aggregate.
- Bus subscribe/publish/unsubscribe.
- Order events reach the registered handlers only after commit, and
  never for rolled-back work.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.events import OrderCancelled, OrderCreated, OrderStatusChanged
from modules.orders.exceptions import InsufficientStock
from modules.orders.models import Order
from shared.infrastructure.bus import InMemoryEventBus, event_bus

pytestmark = pytest.mark.unit


def test_order_registers_and_clears_domain_events():
    order = Order(id=7)
    assert order.domain_events == []

    event = OrderCreated(aggregate_id=order.id, total=100, item_count=1)
    order.add_domain_event(event)

    assert order.domain_events == [event]
    assert event.event_name == "OrderCreated"

    order.clear_domain_events()
    assert order.domain_events == []


def test_events_are_immutable():
    event = OrderStatusChanged(aggregate_id=1, old_status="pending", new_status="confirmed")
    with pytest.raises(AttributeError):
        event.new_status = "shipped"


class TestInMemoryEventBus:
    def test_publish_reaches_subscribers_of_that_type(self):
        bus = InMemoryEventBus()
        created, cancelled = MagicMock(), MagicMock()
        bus.subscribe(OrderCreated, created)
        bus.subscribe(OrderCancelled, cancelled)

        event = OrderCreated(aggregate_id=1)
        bus.publish(event)

        created.handle.assert_called_once_with(event)
        cancelled.handle.assert_not_called()

    def test_subscribe_is_idempotent_and_unsubscribe_removes(self):
        bus = InMemoryEventBus()
        handler = MagicMock()
        bus.subscribe(OrderCreated, handler)
        bus.subscribe(OrderCreated, handler)
        bus.publish(OrderCreated(aggregate_id=1))
        assert handler.handle.call_count == 1

        bus.unsubscribe(OrderCreated, handler)
        bus.publish(OrderCreated(aggregate_id=2))
        assert handler.handle.call_count == 1


@pytest.fixture()
def recorder():
    handler = MagicMock()
    for event_class in (OrderCreated, OrderStatusChanged, OrderCancelled):
        event_bus.subscribe(event_class, handler)
    yield handler
    for event_class in (OrderCreated, OrderStatusChanged, OrderCancelled):
        event_bus.unsubscribe(event_class, handler)


def _published(recorder):
    return [call.args[0] for call in recorder.handle.call_args_list]


class TestOrderEventsAfterCommit:
    def test_order_created_published_on_commit(
        self, order_service, contact_data, make_product, recorder,
        django_capture_on_commit_callbacks,
    ):
        product = make_product(price=1000, stock=5)
        dto = CreateOrderDTO(
            **contact_data,
            shipping_method="pickup",
            payment_method="transfer",
            items=[CreateOrderItemDTO(product_id=product.id, quantity=2)],
        )

        with django_capture_on_commit_callbacks(execute=True):
            order = order_service.create_order(dto)
            assert _published(recorder) == []

        (event,) = _published(recorder)
        assert isinstance(event, OrderCreated)
        assert (event.aggregate_id, event.total, event.item_count) == (order.id, 2420, 1)

    def test_cancellation_publishes_status_change_and_cancelled(
        self, order_service, contact_data, make_product, recorder,
        django_capture_on_commit_callbacks,
    ):
        product = make_product(price=1000, stock=5)
        dto = CreateOrderDTO(
            **contact_data,
            shipping_method="pickup",
            payment_method="transfer",
            items=[CreateOrderItemDTO(product_id=product.id, quantity=1)],
        )
        with django_capture_on_commit_callbacks(execute=True):
            order = order_service.create_order(dto)
        recorder.reset_mock()

        with django_capture_on_commit_callbacks(execute=True):
            order_service.update_status(order.id, "cancelled")

        changed, cancelled = _published(recorder)
        assert isinstance(changed, OrderStatusChanged)
        assert (changed.old_status, changed.new_status) == ("pending", "cancelled")
        assert isinstance(cancelled, OrderCancelled)

    def test_nothing_published_for_rolled_back_order(
        self, order_service, contact_data, make_product, recorder,
        django_capture_on_commit_callbacks,
    ):
        product = make_product(stock=1)
        dto = CreateOrderDTO(
            **contact_data,
            shipping_method="pickup",
            payment_method="transfer",
            items=[CreateOrderItemDTO(product_id=product.id, quantity=2)],
        )
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(InsufficientStock):
                order_service.create_order(dto)

        assert callbacks == []
        assert _published(recorder) == []
