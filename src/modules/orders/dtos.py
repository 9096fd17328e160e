"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: one cart line (product id + quantity).
- ``CreateOrderDTO``: checkout request (contact, address, methods, lines).
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from modules.orders.constants import PaymentMethod, ShippingMethod


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single cart line.

    The storefront sends ``product_id`` and ``quantity``; the unit price
    is read from the catalog by the Service Layer.
    """

    model_config = ConfigDict(frozen=True)

    product_id: int
    quantity: int

    @field_validator("product_id")
    @classmethod
    def product_id_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Product ID must be positive.")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for checkout requests.

    Validates:
    - ``items`` must contain at least one line; lines may repeat a
      product, and the Service Layer sums them for stock purposes.
    - Shipping and payment methods must be known choices.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    email: str
    phone: str
    first_name: str
    last_name: str
    address: str
    apartment: Optional[str] = ""
    city: str
    province: str
    zip_code: str
    shipping_method: ShippingMethod
    payment_method: PaymentMethod
    items: List[CreateOrderItemDTO]
    idempotency_key: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v
