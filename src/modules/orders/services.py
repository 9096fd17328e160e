"""Order service layer (Use Cases).

Orchestrates order creation and status management.  The service
defines the unit-of-work boundary: stock debit, order, items and
receipt are committed together or not at all.

Business rules enforced:
- Every cart line references an existing, non-deleted product.
- Stock is verified per product, summing repeated lines, before anything
  is written, and every short product is reported.
- Stock is debited with store-evaluated conditional decrements, so
  concurrent checkouts can never oversell.
- Prices, shipping and tax come from the catalog snapshot and the
  injected ``PricingPolicy``; never from the client.
- The receipt is rendered once from the persisted order.
- Status transitions are validated against the state machine under a
  row lock and change nothing but ``status``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import IntegrityError, transaction

from modules.orders.constants import OrderStatus
from modules.orders.events import OrderCancelled, OrderCreated, OrderStatusChanged
from modules.orders.exceptions import InvalidOrderStatus, OrderNotFound
from modules.orders.inventory import InventoryLedger, StockDemand
from modules.orders.pricing import PricingPolicy, PricingResult, calculate_pricing
from modules.orders.receipts import render_receipt
from modules.orders.state_machine import ensure_transition

if TYPE_CHECKING:
    from django.db import models

    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PlacedOrder:
    order: Order
    replayed: bool


def aggregate_demands(dto: CreateOrderDTO) -> List[StockDemand]:
    """One stock demand per product, summing repeated cart lines."""
    quantities: Dict[int, int] = {}
    for item in dto.items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return [StockDemand(product_id, quantity) for product_id, quantity in quantities.items()]


class OrderService:
    """Application service for Order use-cases.

    Receives repositories and the pricing policy via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        pricing_policy: Optional[PricingPolicy] = None,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._pricing = pricing_policy or PricingPolicy.from_settings()
        self._ledger = InventoryLedger(product_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create a priced, receipted order and debit its stock.

        See ``place_order``; this variant drops the replay flag.
        """
        return self.place_order(dto).order

    def place_order(self, dto: CreateOrderDTO) -> PlacedOrder:
        """Create an order, or return the one already stored under its key.

        Steps:
        1. Return the existing order when the idempotency key was used.
        2. Read every referenced product in one query.
        3. Verify existence and stock per product, summing the quantities
           of lines that repeat a product (no writes).
        4. Price every cart line from the same snapshot.
        5. In one transaction: debit stock, insert order + items,
           render and store the receipt.

        ``PlacedOrder.replayed`` is true whenever the returned order was
        created by an earlier request, including one that won a
        concurrent race for the same key.

        Raises:
            ProductNotFound: one or more products do not exist.
            InsufficientStock: one or more products lack stock, either at
                check time or because a concurrent order won.
        """
        log = logger.bind(item_count=len(dto.items), shipping_method=str(dto.shipping_method))
        log.info("order.creation_started")

        # 0. Idempotency check
        if dto.idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(dto.idempotency_key)
            if existing:
                log.info("order.idempotency_hit", order_id=existing.id)
                return PlacedOrder(existing, replayed=True)

        # 1-3. Catalog snapshot and all-or-nothing verification
        demands = aggregate_demands(dto)
        snapshot = {
            product.id: product
            for product in self._product_repo.get_by_ids(d.product_id for d in demands)
        }
        self._ledger.check(demands, snapshot)

        # 4. Pricing
        pricing = calculate_pricing(
            [(snapshot[item.product_id], item.quantity) for item in dto.items],
            dto.shipping_method,
            self._pricing,
        )

        # 5. Unit of work
        try:
            order = self._persist(dto, demands, pricing)
        except IntegrityError:
            if not dto.idempotency_key:
                raise
            existing = self._order_repo.get_by_idempotency_key(dto.idempotency_key)
            if existing is None:
                raise
            log.info("order.idempotency_race_lost", order_id=existing.id)
            return PlacedOrder(existing, replayed=True)

        log.info("order.created", order_id=order.id, total=order.total)

        # Re-fetch with prefetch for output
        return PlacedOrder(self._order_repo.get_by_id(order.id) or order, replayed=False)

    @transaction.atomic
    def _persist(
        self,
        dto: CreateOrderDTO,
        demands: list[StockDemand],
        pricing: PricingResult,
    ) -> Order:
        self._ledger.debit(demands)

        order = self._order_repo.create(
            {
                "email": dto.email,
                "phone": dto.phone,
                "first_name": dto.first_name,
                "last_name": dto.last_name,
                "address": dto.address,
                "apartment": dto.apartment or "",
                "city": dto.city,
                "province": dto.province,
                "zip_code": dto.zip_code,
                "shipping_method": str(dto.shipping_method),
                "payment_method": str(dto.payment_method),
                "subtotal": pricing.subtotal,
                "shipping_cost": pricing.shipping_cost,
                "tax": pricing.tax,
                "total": pricing.total,
                "idempotency_key": dto.idempotency_key,
                "items": [
                    {
                        "product_id": line.product_id,
                        "product_name": line.product_name,
                        "product_price": line.unit_price,
                        "quantity": line.quantity,
                    }
                    for line in pricing.lines
                ],
            }
        )

        receipt = render_receipt(order, order.items.all(), tax_rate=self._pricing.tax_rate)
        self._order_repo.set_receipt(order, receipt)

        order.add_domain_event(
            OrderCreated(aggregate_id=order.id, total=order.total, item_count=len(pricing.lines))
        )
        self._order_repo.publish_events(order)
        return order

    @transaction.atomic
    def update_status(self, order_id: int, new_status: str) -> Order:
        """Transition an order to a new status.

        Acquires a row-level lock (``SELECT FOR UPDATE``) on the order
        before validating the transition, which prevents concurrent
        mutations.  Only ``status`` and ``updated_at`` are written; stock
        is untouched, including on cancellation.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: unknown status or transition not allowed.
        """
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(order_id)

        old_status = str(order.status)
        new_status = str(new_status)
        log = logger.bind(
            order_id=order.id,
            current_status=old_status,
            new_status=new_status,
        )

        try:
            ensure_transition(old_status, new_status)
        except InvalidOrderStatus:
            log.warning("order.invalid_transition")
            raise

        order.status = new_status
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=old_status,
                new_status=new_status,
            )
        )
        if new_status == OrderStatus.CANCELLED.value:
            order.add_domain_event(OrderCancelled(aggregate_id=order.id))
        self._order_repo.save(order, update_fields=["status", "updated_at"])

        log.info("order.status_updated")
        return self._order_repo.get_by_id(order.id) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> Order:
        """Retrieve a single order with its items.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(order_id)
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        """Return orders newest first, optionally filtered."""
        return self._order_repo.list(filters)
