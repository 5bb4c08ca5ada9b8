"""Cart serializers for read and write operations."""

from rest_framework import serializers

from .models import CartItem
from .services import add_item, update_item_quantity


class CartItemReadSerializer(serializers.ModelSerializer):
    """Read serializer for a cart item."""

    product_id = serializers.IntegerField(source="product.id")
    name = serializers.CharField(source="product.name")
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "name",
            "variant",
            "quantity",
            "price",
            "line_total",
        ]


class AddItemSerializer(serializers.Serializer):
    """Write serializer for adding an item to the cart."""

    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    variant = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True, default="")

    def create(self, validated_data):  # type: ignore[override]
        user = self.context["request"].user
        return add_item(user=user, **validated_data)


class UpdateItemQuantitySerializer(serializers.Serializer):
    """Write serializer for updating a cart item quantity."""

    quantity = serializers.IntegerField(min_value=1)

    def update(self, instance, validated_data):  # type: ignore[override]
        user = self.context["request"].user
        return update_item_quantity(user=user, item_id=instance.id, quantity=validated_data["quantity"])
