"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: look-ups return ``None``
or omit rows instead of raising, and the Service Layer decides how to
translate a missing product into a domain error.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Product]:
        """Retrieve a non-deleted product by primary key."""
        try:
            return Product.objects.alive().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_by_ids(self, ids: Iterable[int]) -> List[Product]:
        return list(Product.objects.alive().filter(id__in=set(ids)))

    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Product]":
        """List non-deleted products with optional Django ORM look-ups."""
        queryset = Product.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        logger.info("product.saved", product_id=entity.id, sku=entity.sku)
        return entity

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        # UPDATE products SET stock = stock - %s
        #  WHERE id = %s AND deleted_at IS NULL AND stock >= %s
        updated = (
            Product.objects.alive()
            .filter(id=product_id, stock__gte=quantity)
            .update(stock=F("stock") - quantity, updated_at=timezone.now())
        )
        return updated == 1
