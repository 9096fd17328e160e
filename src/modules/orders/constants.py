"""Order domain constants.

Defines status, shipping and payment choices plus the valid status
transitions for the order state machine.  ``VALID_TRANSITIONS`` is the
only place the transition rules are written down.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pendiente"
    CONFIRMED = "confirmed", "Confirmado"
    SHIPPED = "shipped", "Enviado"
    DELIVERED = "delivered", "Entregado"
    CANCELLED = "cancelled", "Cancelado"


class ShippingMethod(models.TextChoices):
    PICKUP = "pickup", "Retiro en Sucursal"
    STANDARD = "standard", "Estándar"
    EXPRESS = "express", "Express"


class PaymentMethod(models.TextChoices):
    CARD = "card", "Tarjeta de Crédito/Débito"
    MERCADOPAGO = "mercadopago", "MercadoPago"
    TRANSFER = "transfer", "Transferencia Bancaria"


INITIAL_STATUS = OrderStatus.PENDING.value

_S = OrderStatus

# Keyed by plain string values: enum members hash by name, not value.
VALID_TRANSITIONS: dict[str, frozenset[str]] = {
    _S.PENDING.value: frozenset({_S.CONFIRMED.value, _S.CANCELLED.value}),
    _S.CONFIRMED.value: frozenset({_S.SHIPPED.value, _S.CANCELLED.value}),
    _S.SHIPPED.value: frozenset({_S.DELIVERED.value}),
    _S.DELIVERED.value: frozenset(),
    _S.CANCELLED.value: frozenset(),
}

TERMINAL_STATES: frozenset[str] = frozenset(
    status for status, targets in VALID_TRANSITIONS.items() if not targets
)
