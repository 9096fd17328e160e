"""Product model: the catalog entries the order engine prices and debits.

Business rules implemented:
- Prices are integer minor currency units (cents); never floats.
- Stock quantity cannot be negative (database check constraint; the
  inventory ledger only ever issues conditional decrements).
- SKU, when present, is unique and normalised to uppercase.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel); a
  soft-deleted product cannot be ordered.
"""

from __future__ import annotations

import structlog
from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class Product(SoftDeleteModel):
    """Catalog product.

    Catalog CRUD lives outside the order engine; this model exists so the
    engine can read price/stock snapshots and issue stock decrements.
    """

    sku = models.CharField(max_length=64, unique=True, null=True, blank=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.PositiveIntegerField(help_text="Unit price in minor currency units.")
    stock = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip().upper()
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": "Stock cannot be negative."})

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=self.id,
                sku=self.sku,
                name=self.name,
            )

    def __str__(self) -> str:
        return f"{self.sku or self.id} - {self.name}"
