"""
PATH: storefront/serializers.py

STOREFRONT SERIALIZERS (CHECKOUT + ORDERS)

Purpose:
- Request/response contracts for the checkout and order endpoints.
- Transport layer only: shape validation here, business rules live in
  orders.services.

Used by:
- storefront/views/checkout.py  (create order intent, verify payment)
- storefront/views/order.py     (order queries, status updates)
"""

from __future__ import annotations

from rest_framework import serializers

from orders.models import Order, OrderItem


class ShippingAddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=120)
    postal_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=120, required=False, allow_blank=True)


class CreateOrderInputSerializer(serializers.Serializer):
    shipping_address = ShippingAddressSerializer()


class OrderIntentResponseSerializer(serializers.Serializer):
    """
    What the client needs to open the gateway checkout widget.
    """

    order_id = serializers.UUIDField()
    order_no = serializers.CharField()
    gateway_order_id = serializers.CharField()
    amount_subunits = serializers.IntegerField()
    currency = serializers.CharField()
    gateway_public_key = serializers.CharField()


class VerifyPaymentInputSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    gateway_order_id = serializers.CharField(max_length=128)
    gateway_payment_id = serializers.CharField(max_length=128)
    gateway_signature = serializers.CharField(max_length=256)


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=32)


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    seller_id = serializers.UUIDField(source="seller.id", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "product_id",
            "product_name",
            "seller_id",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    customer_id = serializers.UUIDField(source="customer.id", read_only=True)
    customer_email = serializers.EmailField(source="customer.email", read_only=True)
    shipping_address = serializers.DictField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_no",
            "customer_id",
            "customer_email",
            "status",
            "items",
            "shipping_address",
            "total_amount",
            "commission_amount",
            "currency",
            "gateway_order_id",
            "gateway_payment_id",
            "cancellation_reason",
            "confirmed_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
