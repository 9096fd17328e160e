"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence

from modules.core.exceptions import (
    DomainConflict,
    DomainNotFound,
    DomainValidationError,
)

if TYPE_CHECKING:
    from modules.orders.inventory import StockShortfall


class OrderNotFound(DomainNotFound):
    """The requested order does not exist or has been soft-deleted."""

    code = "order_not_found"

    def __init__(self, order_id: object) -> None:
        super().__init__(f"Order {order_id} not found.", order_id=order_id)
        self.order_id = order_id


class ProductNotFound(DomainNotFound):
    """One or more products referenced by the cart do not exist."""

    code = "product_not_found"

    def __init__(self, product_ids: Iterable[int]) -> None:
        ids = sorted(product_ids)
        joined = ", ".join(str(pid) for pid in ids)
        super().__init__(f"Product(s) not found: {joined}.", product_ids=ids)
        self.product_ids = ids


class InvalidOrderStatus(DomainValidationError):
    """An invalid status transition was attempted."""

    code = "invalid_status_transition"


class InsufficientStock(DomainConflict):
    """Not enough stock for one or more cart lines.

    ``shortfalls`` lists every insufficient line, not only the first.
    """

    code = "insufficient_stock"

    def __init__(self, shortfalls: Sequence[StockShortfall]) -> None:
        self.shortfalls = list(shortfalls)
        super().__init__(
            f"Insufficient stock for {len(self.shortfalls)} product(s).",
            shortfalls=[shortfall.as_dict() for shortfall in self.shortfalls],
        )
