"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into the standard error
body; the view never swallows generic exceptions.

- ``OrderViewSet``: public checkout and order confirmation look-up.
- ``AdminOrderViewSet``: staff-only listing, detail and status changes.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.exception_handler import error_body, error_response
from modules.core.exceptions import DomainError
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository


def build_order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


def pydantic_error_response(exc: PydanticValidationError) -> Response:
    errors = [
        {
            "code": error["type"],
            "detail": error["msg"],
            "attr": ".".join(str(part) for part in error["loc"]) or None,
        }
        for error in exc.errors()
    ]
    return Response(
        error_body("validation_error", errors),
        status=status.HTTP_400_BAD_REQUEST,
    )


class OrderViewSet(GenericViewSet):
    """Public checkout endpoints.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    permission_classes = [AllowAny]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Assign a throttle scope per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action == "retrieve":
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Supports idempotency via the ``Idempotency-Key`` header.
        Returns 200 if the key was already used, 201 for new orders.
        """
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)

        data = create_serializer.validated_data
        idempotency_key = request.headers.get("Idempotency-Key") or None
        try:
            dto = CreateOrderDTO(
                email=data["email"],
                phone=data["phone"],
                first_name=data["first_name"],
                last_name=data["last_name"],
                address=data["address"],
                apartment=data.get("apartment", ""),
                city=data["city"],
                province=data["province"],
                zip_code=data["zip_code"],
                shipping_method=data["shipping_method"],
                payment_method=data["payment_method"],
                items=[
                    CreateOrderItemDTO(
                        product_id=item["product_id"],
                        quantity=item["quantity"],
                    )
                    for item in data["items"]
                ],
                idempotency_key=idempotency_key,
            )
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)

        try:
            placed = self._service.place_order(dto)
        except DomainError as exc:
            return error_response(exc)

        out = OrderSerializer(placed.order)
        return Response(
            out.data,
            status=status.HTTP_200_OK if placed.replayed else status.HTTP_201_CREATED,
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except DomainError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order).data)


class AdminOrderViewSet(GenericViewSet):
    """Staff-only order management.

    Filtering (status, date range, total range, email) is handled by
    ``OrderFilter``; ordering by ``OrderingFilter``.  Results are
    paginated.
    """

    serializer_class = OrderSerializer
    permission_classes = [IsAdminUser]
    throttle_scope = "order_listing"
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    pagination_class = StandardResultsSetPagination

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_queryset(self):
        return self._service.list_orders()

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        if self.action == "partial_update":
            return UpdateOrderStatusSerializer
        return OrderSerializer

    def list(self, request: Request) -> Response:
        """GET /api/v1/admin/orders/?page=&limit=&status="""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/admin/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except DomainError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/admin/orders/{pk}/

        Runs the status state machine; any other field is ignored.
        """
        status_serializer = UpdateOrderStatusSerializer(data=request.data)
        status_serializer.is_valid(raise_exception=True)

        try:
            order = self._service.update_status(
                order_id=pk,
                new_status=status_serializer.validated_data["status"],
            )
        except DomainError as exc:
            return error_response(exc)

        return Response(OrderSerializer(order).data)
