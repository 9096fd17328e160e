"""Inventory ledger: all-or-nothing stock verification and debit.

Two phases, mirroring the order creation flow:

1. ``check`` validates every demand against the catalog snapshot the
   order is priced from.  It reports *every* missing product or short
   line at once and writes nothing.
2. ``debit`` runs inside the order transaction and issues one
   conditional decrement per product (``stock = stock - n WHERE
   stock >= n``).  The store evaluates the condition, so two checkouts
   that both passed ``check`` cannot both take the last units; the loser
   gets zero affected rows and raises ``InsufficientStock`` with the
   availability it can now see.  Raising rolls back the debits already
   applied in the same transaction.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Dict, List, Mapping, Sequence

import structlog
from django.db import transaction

from modules.orders.exceptions import InsufficientStock, ProductNotFound

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockDemand:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class StockShortfall:
    product_id: int
    product_name: str
    requested: int
    available: int

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


class InventoryLedger:
    """Verifies and debits stock through the product repository."""

    def __init__(self, product_repository: IProductRepository) -> None:
        self._product_repo = product_repository

    def check(
        self,
        demands: Sequence[StockDemand],
        snapshot: Mapping[int, Product],
    ) -> None:
        """Validate *demands* against *snapshot* without writing.

        Raises:
            ProductNotFound: a demanded product is not in the snapshot.
            InsufficientStock: one or more demands exceed snapshot stock.
        """
        missing = [d.product_id for d in demands if d.product_id not in snapshot]
        if missing:
            raise ProductNotFound(missing)

        shortfalls = [
            StockShortfall(
                product_id=demand.product_id,
                product_name=snapshot[demand.product_id].name,
                requested=demand.quantity,
                available=snapshot[demand.product_id].stock,
            )
            for demand in demands
            if demand.quantity > snapshot[demand.product_id].stock
        ]
        if shortfalls:
            logger.info(
                "inventory.check_failed",
                product_ids=[s.product_id for s in shortfalls],
            )
            raise InsufficientStock(shortfalls)

    def debit(self, demands: Sequence[StockDemand]) -> None:
        """Conditionally decrement stock for every demand.

        Must be called inside ``transaction.atomic()``; the caller's
        transaction is what makes the debits all-or-nothing.

        Raises:
            ProductNotFound: a product disappeared since the snapshot.
            InsufficientStock: a concurrent order took the stock first.
        """
        if not transaction.get_connection().in_atomic_block:
            raise RuntimeError("InventoryLedger.debit requires an atomic block.")

        failed: List[StockDemand] = []
        # Stable lock order across concurrent checkouts avoids deadlocks.
        for demand in sorted(demands, key=lambda d: d.product_id):
            if self._product_repo.decrement_stock(demand.product_id, demand.quantity):
                logger.info(
                    "order.stock_debited",
                    product_id=demand.product_id,
                    quantity=demand.quantity,
                )
            else:
                failed.append(demand)

        if failed:
            self._raise_for_failed(failed)

    def _raise_for_failed(self, failed: Sequence[StockDemand]) -> None:
        current = {
            product.id: product
            for product in self._product_repo.get_by_ids(d.product_id for d in failed)
        }
        missing = [d.product_id for d in failed if d.product_id not in current]
        if missing:
            raise ProductNotFound(missing)

        shortfalls = [
            StockShortfall(
                product_id=demand.product_id,
                product_name=current[demand.product_id].name,
                requested=demand.quantity,
                available=current[demand.product_id].stock,
            )
            for demand in failed
        ]
        logger.warning(
            "inventory.debit_conflict",
            product_ids=[s.product_id for s in shortfalls],
        )
        raise InsufficientStock(shortfalls)
