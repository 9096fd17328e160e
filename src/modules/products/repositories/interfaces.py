"""Product repository interface (catalog reader).

Extends ``IRepository[Product]`` with the batch look-up the order engine
prices from and the conditional stock decrement the inventory ledger
relies on.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Iterable, List

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for catalog products."""

    @abstractmethod
    def get_by_ids(self, ids: Iterable[int]) -> List[Product]:
        """Load every non-deleted product whose id is in *ids* in one read.

        Missing or soft-deleted ids are simply absent from the result.
        """

    @abstractmethod
    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """Atomically subtract *quantity* from stock if enough is available.

        Evaluated by the store as one conditional write.  Returns ``False``
        (and changes nothing) when the product is missing, soft-deleted or
        has less than *quantity* in stock.
        """
