# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Order(models.Model):
    """
    Customer order created at checkout, before payment.

    Key rules:
    - Order is created PENDING together with a gateway order
    - It becomes CONFIRMED only after the payment callback is verified
      (stock is deducted in the same transaction)
    - total_amount is computed once from captured line prices and never
      recomputed (price locked)
    - Orders are never hard-deleted
    """

    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_PROCESSING = "processing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    _IMMUTABLE_FIELDS = (
        "customer_id",
        "total_amount",
        "commission_amount",
        "currency",
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_no = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated public order number (also the gateway receipt)",
    )

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    # Shipping address
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=120)
    state = models.CharField(max_length=120)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=120, default="India")

    # Money fields (server authoritative)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    commission_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    currency = models.CharField(max_length=8, default="INR")

    # Gateway references
    gateway_order_id = models.CharField(max_length=128, unique=True)
    gateway_payment_id = models.CharField(max_length=128, null=True, blank=True)

    status = models.CharField(
        max_length=32, choices=STATUS_CHOICES, default=STATUS_PENDING
    )
    cancellation_reason = models.CharField(max_length=255, blank=True, default="")

    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    # Once-per-order inventory markers
    stock_deducted_at = models.DateTimeField(null=True, blank=True)
    stock_restored_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="order_status_idx"),
            models.Index(fields=["customer", "created_at"], name="order_customer_created_idx"),
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
        ]

    @staticmethod
    def generate_order_no() -> str:
        prefix = timezone.now().strftime("ORD%Y%m%d")
        return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

    @property
    def shipping_address(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }

    def _validate_immutable(self, previous: "Order"):
        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(
                    f"Order {previous.order_no}: field '{field}' cannot be changed after creation."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Order.objects.filter(pk=self.pk).first()
            if previous:
                self._validate_immutable(previous)

        if not self.order_no:
            self.order_no = self.generate_order_no()

        if self.status == self.STATUS_CONFIRMED and not self.confirmed_at:
            self.confirmed_at = timezone.now()

        if self.status == self.STATUS_CANCELLED and not self.cancelled_at:
            self.cancelled_at = timezone.now()

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_no} | {self.total_amount} {self.currency} | {self.status}"
