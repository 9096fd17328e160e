"""Order pricing.

All amounts are integers in minor currency units (cents).  The
calculator is a pure function of the catalog snapshot, the quantities
and a ``PricingPolicy``; it never touches the database, so the prices
that are charged are exactly the prices the caller read.

Tax is ``subtotal * tax_rate`` rounded half-up to the nearest minor
unit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple

from django.conf import settings


class PricedProduct(Protocol):
    id: int
    name: str
    price: int


@dataclass(frozen=True)
class PricingPolicy:
    """Tax rate and shipping cost table, injected rather than hard-coded."""

    tax_rate: Decimal = Decimal("0.21")
    shipping_costs: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType(
            {"pickup": 0, "standard": 300000, "express": 800000}
        )
    )
    rounding: str = ROUND_HALF_UP

    @classmethod
    def from_settings(cls, config: Optional[Mapping[str, Any]] = None) -> PricingPolicy:
        """Build the policy from ``settings.ORDER_PRICING`` (or *config*)."""
        if config is None:
            config = getattr(settings, "ORDER_PRICING", {})
        defaults = cls()
        return cls(
            tax_rate=Decimal(str(config.get("TAX_RATE", defaults.tax_rate))),
            shipping_costs=MappingProxyType(
                dict(config.get("SHIPPING_COSTS", defaults.shipping_costs))
            ),
        )

    def shipping_cost_for(self, method: str) -> int:
        # Unknown methods ship free; input validation rejects them earlier.
        return int(self.shipping_costs.get(str(method), 0))

    def tax_for(self, subtotal: int) -> int:
        amount = Decimal(subtotal) * self.tax_rate
        return int(amount.quantize(Decimal(1), rounding=self.rounding))


@dataclass(frozen=True)
class PricedLine:
    product_id: int
    product_name: str
    unit_price: int
    quantity: int
    line_total: int


@dataclass(frozen=True)
class PricingResult:
    lines: Tuple[PricedLine, ...]
    subtotal: int
    shipping_cost: int
    tax: int
    total: int


def calculate_pricing(
    lines: Sequence[Tuple[PricedProduct, int]],
    shipping_method: str,
    policy: PricingPolicy,
) -> PricingResult:
    """Price ``(product, quantity)`` pairs for the given shipping method.

    ``total == subtotal + shipping_cost + tax`` and
    ``subtotal == sum(line.line_total)`` hold by construction.
    """
    priced: List[PricedLine] = []
    for product, quantity in lines:
        unit_price = int(product.price)
        priced.append(
            PricedLine(
                product_id=product.id,
                product_name=product.name,
                unit_price=unit_price,
                quantity=quantity,
                line_total=unit_price * quantity,
            )
        )

    subtotal = sum(line.line_total for line in priced)
    shipping_cost = policy.shipping_cost_for(shipping_method)
    tax = policy.tax_for(subtotal)
    return PricingResult(
        lines=tuple(priced),
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax=tax,
        total=subtotal + shipping_cost + tax,
    )
