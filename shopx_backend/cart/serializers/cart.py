# cart/serializers/cart.py

"""
CART SERIALIZER

Purpose:
- Return the customer's cart in a frontend-friendly shape.
- Totals are server-derived from live product prices (never trusted from client).
"""

from rest_framework import serializers

from cart.models import Cart
from .cart_item import CartItemSerializer


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)

    item_count = serializers.IntegerField(read_only=True)
    subtotal_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        read_only=True,
    )

    class Meta:
        model = Cart
        fields = [
            "id",
            "items",
            "item_count",
            "subtotal_amount",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
