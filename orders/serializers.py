"""DRF serializers for Orders.

Totals and line prices are the values captured at checkout; nothing here
recomputes them from live product data.
"""

from common.choices import OrderStatus
from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    """Order line joined with the product's display fields."""

    product_id = serializers.IntegerField(source="product.id", read_only=True)
    name = serializers.CharField(source="product.name", read_only=True)
    image_url = serializers.CharField(source="product.image_url", read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product_id", "name", "image_url", "quantity", "price", "line_total"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = ["id", "total", "status", "tracking_number", "created_at", "updated_at"]
        read_only_fields = fields


class AdminOrderSerializer(OrderSerializer):
    """Order with its owner's identity, for the administrative listing."""

    user_id = serializers.IntegerField(read_only=True)
    user_name = serializers.CharField(source="user.display_name", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["user_id", "user_name", "email"]
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    """Input for the administrative status update.

    The status must match an enumerated value exactly; anything else,
    including a missing or blank status, fails with "Invalid status". A
    blank or missing tracking number clears the stored one.
    """

    status = serializers.ChoiceField(
        choices=OrderStatus.choices,
        error_messages={
            "invalid_choice": "Invalid status",
            "required": "Invalid status",
            "null": "Invalid status",
        },
    )
    tracking_number = serializers.CharField(max_length=64, required=False, allow_null=True, allow_blank=True)
