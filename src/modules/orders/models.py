"""Order and OrderItem models.

Business rules implemented:
- Money is stored as integer minor currency units.
- ``total == subtotal + shipping_cost + tax`` (database check constraint).
- OrderItem snapshots product name and unit price at order time; later
  catalog changes never affect historical orders.
- OrderItem ``line_total`` is always ``quantity * product_price``.
- ``status`` is the only field changed after creation, and only through
  the state machine (``modules.orders.state_machine``).
- ``receipt_text`` is written once, inside the creation transaction.
- Idempotency via the nullable unique ``idempotency_key``.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import (
    INITIAL_STATUS,
    TERMINAL_STATES,
    OrderStatus,
    PaymentMethod,
    ShippingMethod,
)
from modules.orders.state_machine import can_transition
from shared.domain.events import DomainEventMixin

ORDER_NUMBER_WIDTH = 6


class Order(DomainEventMixin, SoftDeleteModel):
    """Order aggregate root.

    The integer ``id`` doubles as the customer-facing order number
    (zero-padded, see ``order_number``).
    """

    email = models.EmailField(max_length=255)
    phone = models.CharField(max_length=50)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    address = models.CharField(max_length=255)
    apartment = models.CharField(max_length=100, blank=True, default="")
    city = models.CharField(max_length=100)
    province = models.CharField(max_length=100)
    zip_code = models.CharField(max_length=20)

    shipping_method = models.CharField(max_length=20, choices=ShippingMethod.choices)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)

    subtotal = models.PositiveBigIntegerField()
    shipping_cost = models.PositiveBigIntegerField()
    tax = models.PositiveBigIntegerField()
    total = models.PositiveBigIntegerField()

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=INITIAL_STATUS,
    )
    receipt_text = models.TextField(blank=True, default="")
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(
                    total=models.F("subtotal") + models.F("shipping_cost") + models.F("tax")
                ),
                name="orders_total_matches_components",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return str(self.status) in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        return can_transition(self.status, new_status)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    @property
    def order_number(self) -> str:
        return str(self.id).zfill(ORDER_NUMBER_WIDTH) if self.id is not None else ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:
        return f"#{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Immutable line item of an Order.

    ``product_name`` and ``product_price`` are **snapshots** taken when the
    order was placed.  ``line_total`` is recomputed on save so it can never
    disagree with them.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=255)
    product_price = models.PositiveBigIntegerField()
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    line_total = models.PositiveBigIntegerField(editable=False)

    class Meta:
        db_table = "order_items"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.line_total = self.quantity * self.product_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} ({self.line_total})"
