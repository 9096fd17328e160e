"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the Order aggregate
needs: atomic creation with items, the one-time receipt write, row
locking for status transitions and idempotency-key look-up.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db import models

    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate is an Order plus its OrderItem children.  Mutations
    must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Insert an order and its items.

        ``data`` holds the order columns plus ``items``: a list of dicts
        with ``product_id``, ``product_name``, ``product_price`` and
        ``quantity``.
        """

    @abstractmethod
    def set_receipt(self, order: Order, receipt_text: str) -> None:
        """Store the receipt text; allowed only while it is still blank."""

    @abstractmethod
    def get_by_id(self, id: int) -> Optional[Order]:
        """Retrieve a non-deleted order with its items prefetched."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve a non-deleted order holding a row-level lock."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        """List non-deleted orders, newest first."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        """Retrieve an order by its idempotency key, soft-deleted or not."""

    @abstractmethod
    def publish_events(self, entity: Order) -> None:
        """Hand the aggregate's collected events to the bus after commit."""
