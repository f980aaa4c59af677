# cart/views/api.py

"""
CART API VIEWS

Purpose:
- Customer cart lifecycle: view, add, update, remove, clear.

Hard rules:
- A customer only ever touches their own cart (resolved from request.user).
- Adding/updating checks the product is active and that the requested
  quantity fits current stock. Stock is NOT reserved here; it is checked
  again when the order intent is built and settled on payment confirmation.
"""

from __future__ import annotations

import logging

from django.db import transaction
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from cart.models import Cart, CartItem
from cart.serializers import CartSerializer
from cart.serializers.cart_item import (
    AddCartItemInputSerializer,
    UpdateCartItemInputSerializer,
)
from products.models import Product
from storefront.views.errors import error_response, invalid_input_response

logger = logging.getLogger(__name__)


# =====================================================
# HELPERS
# =====================================================

def _get_cart(*, customer) -> Cart:
    cart, _ = Cart.objects.get_or_create(customer=customer)
    return cart


def _cart_payload(cart: Cart):
    cart = Cart.objects.prefetch_related("items__product").get(pk=cart.pk)
    return CartSerializer(cart).data


def _check_product(*, product_id, quantity: int):
    """
    Returns (product, None) when the line is acceptable,
    otherwise (None, error Response).
    """
    product = Product.objects.filter(pk=product_id).first()
    if product is None:
        return None, error_response(
            code="not_found",
            message="Product not found.",
            http_status=status.HTTP_404_NOT_FOUND,
        )

    if not product.is_active:
        return None, error_response(
            code="unavailable",
            message=f"{product.name} is currently unavailable.",
            http_status=status.HTTP_409_CONFLICT,
        )

    if quantity > int(product.stock):
        return None, error_response(
            code="insufficient_stock",
            message=f"Only {product.stock} of {product.name} available.",
            http_status=status.HTTP_409_CONFLICT,
        )

    return product, None


# =====================================================
# CART API VIEWS
# =====================================================

class CartView(APIView):
    """
    Retrieve (or lazily create) the authenticated customer's cart.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(
        responses={200: CartSerializer},
        description="Get the authenticated customer's cart",
        tags=["Cart"],
    )
    def get(self, request):
        cart = _get_cart(customer=request.user)
        return Response(_cart_payload(cart), status=status.HTTP_200_OK)


class AddCartItemView(APIView):
    """
    Add a product to the cart (increments quantity if already present).
    """

    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(
        request=AddCartItemInputSerializer,
        responses={
            200: CartSerializer,
            400: OpenApiResponse(description="invalid_input"),
            404: OpenApiResponse(description="not_found"),
            409: OpenApiResponse(description="unavailable / insufficient_stock"),
        },
        description="Add a product to the cart",
        tags=["Cart"],
    )
    @transaction.atomic
    def post(self, request):
        serializer = AddCartItemInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer)

        product_id = serializer.validated_data["product_id"]
        quantity = int(serializer.validated_data["quantity"])

        cart = _get_cart(customer=request.user)
        existing = CartItem.objects.filter(cart=cart, product_id=product_id).first()
        wanted = quantity + (int(existing.quantity) if existing else 0)

        product, error = _check_product(product_id=product_id, quantity=wanted)
        if error is not None:
            return error

        if existing:
            existing.quantity = wanted
            existing.save(update_fields=["quantity"])
        else:
            CartItem.objects.create(cart=cart, product=product, quantity=quantity)

        logger.info(
            "Cart item added",
            extra={"customer_id": str(request.user.pk), "product_id": str(product_id), "quantity": wanted},
        )
        return Response(_cart_payload(cart), status=status.HTTP_200_OK)


class CartItemView(APIView):
    """
    Update the quantity of, or remove, one product line.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    def _get_item(self, *, request, product_id):
        cart = _get_cart(customer=request.user)
        return cart, CartItem.objects.filter(cart=cart, product_id=product_id).first()

    @extend_schema(
        request=UpdateCartItemInputSerializer,
        responses={200: CartSerializer},
        description="Set the quantity of a cart line",
        tags=["Cart"],
    )
    @transaction.atomic
    def patch(self, request, product_id):
        serializer = UpdateCartItemInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer)

        quantity = int(serializer.validated_data["quantity"])

        cart, item = self._get_item(request=request, product_id=product_id)
        if item is None:
            return error_response(
                code="not_found",
                message="Product is not in the cart.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        _, error = _check_product(product_id=product_id, quantity=quantity)
        if error is not None:
            return error

        item.quantity = quantity
        item.save(update_fields=["quantity"])

        return Response(_cart_payload(cart), status=status.HTTP_200_OK)

    @extend_schema(
        responses={200: CartSerializer},
        description="Remove a product from the cart",
        tags=["Cart"],
    )
    @transaction.atomic
    def delete(self, request, product_id):
        cart, item = self._get_item(request=request, product_id=product_id)
        if item is None:
            return error_response(
                code="not_found",
                message="Product is not in the cart.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        item.delete()
        return Response(_cart_payload(cart), status=status.HTTP_200_OK)


class ClearCartView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(
        request=None,
        responses={200: CartSerializer},
        description="Remove every item from the cart",
        tags=["Cart"],
    )
    @transaction.atomic
    def post(self, request):
        cart = _get_cart(customer=request.user)
        cart.items.all().delete()
        return Response(_cart_payload(cart), status=status.HTTP_200_OK)
