# storefront/urls.py
"""
ORDER API URLS

Base path (mounted in backend/urls.py):
    /api/orders/

Checkout:
- POST  /api/orders/create/
- POST  /api/orders/verify/

Queries / management:
- GET   /api/orders/my/
- GET   /api/orders/
- GET   /api/orders/<order_id>/
- PATCH /api/orders/<order_id>/status/
"""

from __future__ import annotations

from django.urls import path

from storefront.views.checkout import CreateOrderView, VerifyPaymentView
from storefront.views.order import (
    AllOrdersView,
    MyOrdersView,
    OrderDetailView,
    OrderStatusView,
)

app_name = "orders"

urlpatterns = [
    path("", AllOrdersView.as_view(), name="order-list"),
    path("create/", CreateOrderView.as_view(), name="order-create"),
    path("verify/", VerifyPaymentView.as_view(), name="order-verify"),
    path("my/", MyOrdersView.as_view(), name="my-orders"),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<uuid:order_id>/status/", OrderStatusView.as_view(), name="order-status"),
]
