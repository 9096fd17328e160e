"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import PaymentMethod, ShippingMethod
from modules.orders.models import Order, OrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single cart line in an order creation request."""

    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the checkout payload."""

    email = serializers.EmailField(max_length=255)
    phone = serializers.CharField(max_length=50)
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    address = serializers.CharField(max_length=255)
    apartment = serializers.CharField(
        max_length=100, required=False, default="", allow_blank=True
    )
    city = serializers.CharField(max_length=100)
    province = serializers.CharField(max_length=100)
    zip_code = serializers.CharField(max_length=20)
    shipping_method = serializers.ChoiceField(choices=ShippingMethod.choices)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    items = CreateOrderItemSerializer(many=True, allow_empty=False)


class UpdateOrderStatusSerializer(serializers.Serializer):
    """Validates the admin status change payload.

    Only presence is checked here; whether the value is a known status
    and an allowed transition is decided by the state machine, so the
    error carries the allowed targets.
    """

    status = serializers.CharField(max_length=20)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order items with product snapshot."""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_price",
            "quantity",
            "line_total",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and receipt."""

    order_number = serializers.CharField(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "status_display",
            "email",
            "phone",
            "first_name",
            "last_name",
            "address",
            "apartment",
            "city",
            "province",
            "zip_code",
            "shipping_method",
            "payment_method",
            "subtotal",
            "shipping_cost",
            "tax",
            "total",
            "receipt_text",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for the admin order list (no nested relations)."""

    order_number = serializers.CharField(read_only=True)
    customer_name = serializers.CharField(source="full_name", read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "customer_name",
            "email",
            "shipping_method",
            "total",
            "item_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_item_count(self, obj: Order) -> int:
        # ``items`` is prefetched by the repository.
        return len(obj.items.all())

