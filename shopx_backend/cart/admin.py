from django.contrib import admin

from .models import Cart, CartItem

# =====================================================
# CART ITEM INLINE (READ-ONLY)
# =====================================================


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "quantity",
        "unit_price",
        "line_total",
        "added_at",
    )

    def has_add_permission(self, request, obj=None):
        return False


# =====================================================
# CART ADMIN
# =====================================================


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "customer",
        "item_count",
        "subtotal_amount",
        "updated_at",
    )

    readonly_fields = (
        "id",
        "customer",
        "created_at",
        "updated_at",
        "subtotal_amount",
        "item_count",
    )

    search_fields = ("customer__email",)

    inlines = [CartItemInline]
