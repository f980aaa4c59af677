# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderItem, PaymentRecord


# ======================================================
# ORDER ADMIN
# ======================================================


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "seller",
        "quantity",
        "unit_price",
        "line_total",
    )

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Status changes go through the orders API so stock settlement and
    lifecycle rules apply; the admin is a read view.
    """

    list_display = (
        "order_no",
        "customer",
        "status",
        "total_amount",
        "currency",
        "created_at",
    )
    readonly_fields = [f.name for f in Order._meta.fields]
    search_fields = ("order_no", "gateway_order_id", "gateway_payment_id", "customer__email")
    list_filter = ("status", "created_at")

    inlines = [OrderItemInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# PAYMENT RECORD ADMIN
# ======================================================


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = (
        "gateway_payment_id",
        "order",
        "amount",
        "currency",
        "status",
        "created_at",
    )
    readonly_fields = [f.name for f in PaymentRecord._meta.fields]
    search_fields = ("gateway_order_id", "gateway_payment_id", "order__order_no")
    list_filter = ("status", "created_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
