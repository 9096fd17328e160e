"""Plain-text order receipt.

``render_receipt`` is pure: the same order and items always produce the
same text.  Currency and date formats are fixed (Argentine peso style,
``$ 1.234,56`` and ``dd/mm/YYYY`` in the store time zone) instead of
following the process locale.  The text is rendered once inside the
order creation transaction and stored on the order; it is never
regenerated.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Protocol

from django.conf import settings
from django.utils import timezone

from modules.orders.constants import PaymentMethod, ShippingMethod

DIVIDER = "=" * 40
THIN_DIVIDER = "-" * 40

SHIPPING_LABELS = dict(ShippingMethod.choices)
PAYMENT_LABELS = dict(PaymentMethod.choices)


class ReceiptOrder(Protocol):
    order_number: str
    email: str
    phone: str
    first_name: str
    last_name: str
    address: str
    apartment: str
    city: str
    province: str
    zip_code: str
    shipping_method: str
    payment_method: str
    subtotal: int
    shipping_cost: int
    tax: int
    total: int
    created_at: datetime


class ReceiptItem(Protocol):
    product_name: str
    product_price: int
    quantity: int
    line_total: int


def format_currency(cents: int) -> str:
    """Format minor units as ``$ 1.234,56`` (dot thousands, comma decimals)."""
    sign = "-" if cents < 0 else ""
    units, fraction = divmod(abs(int(cents)), 100)
    grouped = f"{units:,}".replace(",", ".")
    return f"{sign}$ {grouped},{fraction:02d}"


def format_date(value: datetime) -> str:
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.strftime("%d/%m/%Y")


def format_rate(rate: Decimal) -> str:
    percent = (Decimal(rate) * 100).normalize()
    return f"{percent:f}%"


def render_receipt(
    order: ReceiptOrder,
    items: Iterable[ReceiptItem],
    tax_rate: Decimal = Decimal("0.21"),
    store_name: Optional[str] = None,
) -> str:
    """Render the fixed-layout receipt for a priced, persisted order."""
    if store_name is None:
        store_name = getattr(settings, "STORE_NAME", "Electromundo")

    lines: List[str] = [
        DIVIDER,
        f"        PEDIDO #{order.order_number}",
        DIVIDER,
        f"FECHA: {format_date(order.created_at)}",
        "",
        "DATOS DE CONTACTO",
        f"Nombre: {order.first_name} {order.last_name}",
        f"Email: {order.email}",
        f"Teléfono: {order.phone}",
        "",
        "DIRECCIÓN DE ENVÍO",
        order.address,
    ]
    if order.apartment:
        lines.append(order.apartment)
    lines += [
        f"{order.city}, {order.province}",
        f"CP: {order.zip_code}",
        "",
        "PRODUCTOS",
    ]

    for item in items:
        lines += [
            f"- {item.product_name}",
            f"  Cantidad: {item.quantity} x {format_currency(item.product_price)}",
            f"  Subtotal: {format_currency(item.line_total)}",
        ]

    shipping_label = SHIPPING_LABELS.get(order.shipping_method, order.shipping_method)
    shipping = "Gratis" if order.shipping_cost == 0 else format_currency(order.shipping_cost)
    payment_label = PAYMENT_LABELS.get(order.payment_method, order.payment_method)

    lines += [
        "",
        "RESUMEN",
        f"Subtotal: {format_currency(order.subtotal)}",
        f"Envío ({shipping_label}): {shipping}",
        f"IVA ({format_rate(tax_rate)}): {format_currency(order.tax)}",
        THIN_DIVIDER,
        f"TOTAL: {format_currency(order.total)}",
        "",
        f"MÉTODO DE PAGO: {payment_label}",
        "",
        f"Gracias por tu compra en {store_name}!",
        DIVIDER,
    ]
    return "\n".join(lines)
