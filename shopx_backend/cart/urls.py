"""
PATH: cart/urls.py

CART URLS

Mounted at /api/cart/
"""

from django.urls import path

from cart.views.api import (
    AddCartItemView,
    CartItemView,
    CartView,
    ClearCartView,
)

app_name = "cart"

urlpatterns = [
    path("", CartView.as_view(), name="cart"),
    path("clear/", ClearCartView.as_view(), name="clear-cart"),
    path("items/", AddCartItemView.as_view(), name="add-cart-item"),
    path("items/<uuid:product_id>/", CartItemView.as_view(), name="cart-item"),
]
