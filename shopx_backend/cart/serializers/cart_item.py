"""
PATH: cart/serializers/cart_item.py

CART ITEM SERIALIZERS

- CartItemSerializer: read shape for cart lines (price shown at current
  effective product price; captured only when an order is created).
- AddCartItemInputSerializer / UpdateCartItemInputSerializer: request bodies.
"""

from rest_framework import serializers

from cart.models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    is_available = serializers.BooleanField(source="product.is_active", read_only=True)

    unit_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        read_only=True,
    )

    line_total = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        read_only=True,
    )

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "is_available",
            "quantity",
            "unit_price",
            "line_total",
            "added_at",
        ]
        read_only_fields = fields


class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateCartItemInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
