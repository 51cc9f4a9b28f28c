"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.

Input serializers check shape only. An empty ``lines`` list or a
quantity below one passes through so the engine can reject it with a
validation result.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderLine

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField()


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    account_id = serializers.IntegerField()
    lines = CreateOrderLineSerializer(many=True, allow_empty=True)


class SalesReportQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()


class AccountQuerySerializer(serializers.Serializer):
    account = serializers.IntegerField()


class TopOrdersQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False)


class LargeOrdersQuerySerializer(serializers.Serializer):
    min_lines = serializers.IntegerField(required=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderLineSerializer(serializers.ModelSerializer):
    """Read serializer for order lines with the snapshotted unit price."""

    product_name = serializers.CharField(
        source="product.name", read_only=True, allow_null=True, default=None
    )

    class Meta:
        model = OrderLine
        fields = [
            "id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested lines."""

    lines = OrderLineSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "account_id",
            "total_amount",
            "created_at",
            "updated_at",
            "lines",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists."""

    line_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "account_id",
            "total_amount",
            "line_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_line_count(self, obj: Order) -> int:
        return len(obj.lines.all())
