"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Domain events collected on the aggregate are published to the
in-memory event bus only after the surrounding transaction commits,
so rolled-back work never announces itself.

Concurrency control on status updates uses ``select_for_update()``.
"""

from __future__ import annotations

from functools import partial
from typing import Any, Dict, Optional, Sequence

import structlog
from django.db import models, transaction

from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically."""
        fields = dict(data)
        items = fields.pop("items", [])

        order = Order(**fields)
        order.save()

        order_items = []
        for item_data in items:
            item = OrderItem(
                order=order,
                product_id=item_data["product_id"],
                product_name=item_data["product_name"],
                product_price=item_data["product_price"],
                quantity=item_data["quantity"],
            )
            item.save()
            order_items.append(item)

        logger.info("order.persisted", order_id=order.id, item_count=len(order_items))
        return order

    @transaction.atomic
    def set_receipt(self, order: Order, receipt_text: str) -> None:
        updated = Order.objects.filter(id=order.id, receipt_text="").update(
            receipt_text=receipt_text
        )
        if updated != 1:
            raise RuntimeError(f"Receipt for order {order.id} is already written.")
        order.receipt_text = receipt_text

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _base_queryset(self) -> "models.QuerySet[Order]":
        return Order.objects.alive().prefetch_related("items")

    def get_by_id(self, id: int) -> Optional[Order]:
        """Retrieve an order with its items prefetched.

        Returns ``None`` for non-existent, soft-deleted or invalid IDs.
        """
        try:
            return self._base_queryset().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must be called inside ``transaction.atomic()``.  Returns ``None``
        for non-existent or invalid IDs.
        """
        try:
            return Order.objects.alive().select_for_update().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        """List orders with optional filters and eager-loaded items.

        Supported filter keys are any Django look-ups on ``Order``, e.g.
        ``status`` or ``created_at__date__gte``.
        """
        queryset = self._base_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        # Keys stay unique across soft-deleted rows, so look them up there too.
        return (
            Order.objects.prefetch_related("items").filter(idempotency_key=key).first()
        )

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order, update_fields: Optional[Sequence[str]] = None) -> Order:
        """Persist an order and schedule its domain events for after commit."""
        if update_fields is None:
            entity.save()
        else:
            entity.save(update_fields=list(update_fields))

        logger.info("order.saved", order_id=entity.id)
        self.publish_events(entity)
        return entity

    def publish_events(self, entity: Order) -> None:
        """Schedule collected events for publication once the transaction commits.

        Outside an atomic block Django runs ``on_commit`` callbacks
        immediately.
        """
        for event in entity.domain_events:
            transaction.on_commit(partial(event_bus.publish, event))
        entity.clear_domain_events()
