# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Product catalogue is editable from admin (catalogue CRUD lives elsewhere).
- stock is read-only here: it is owned by order settlement
  (products.services.inventory) so admin edits can't race a checkout.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "slug",
        "seller",
        "price",
        "discounted_price",
        "stock",
        "is_active",
    )
    list_filter = ("is_active", "category")
    search_fields = ("name", "slug", "seller__email")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("stock", "created_at", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        # Opening stock may be set on creation only.
        if obj is None:
            return ("created_at", "updated_at")
        return self.readonly_fields
