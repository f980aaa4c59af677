# storefront/seller_urls.py
"""
SELLER API URLS

Base path (mounted in backend/urls.py):
    /api/seller/

- GET   /api/seller/orders/
"""

from __future__ import annotations

from django.urls import path

from storefront.views.order import SellerOrdersView

app_name = "seller"

urlpatterns = [
    path("orders/", SellerOrdersView.as_view(), name="seller-orders"),
]
