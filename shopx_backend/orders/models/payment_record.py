# orders/models/payment_record.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class PaymentRecord(models.Model):
    """
    Verified gateway payment for an Order.

    Idempotency rule:
    - gateway_order_id and gateway_payment_id are each unique
    - a record is written only after the callback signature verified,
      and is never mutated by the checkout flow afterwards
    """

    STATUS_CREATED = "created"
    STATUS_CAPTURED = "captured"
    STATUS_FAILED = "failed"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_CREATED, "Created"),
        (STATUS_CAPTURED, "Captured"),
        (STATUS_FAILED, "Failed"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    gateway_order_id = models.CharField(max_length=128, unique=True)
    gateway_payment_id = models.CharField(max_length=128, unique=True)
    gateway_signature = models.CharField(max_length=256)

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    currency = models.CharField(max_length=8, default="INR")

    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_CAPTURED)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="payment_status_idx"),
            models.Index(fields=["order", "created_at"], name="payment_order_created_idx"),
        ]

    def __str__(self):
        return f"{self.gateway_payment_id} | {self.amount} {self.currency} | {self.status}"
