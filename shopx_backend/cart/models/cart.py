"""
PATH: cart/models/cart.py

CART MODEL

Purpose:
- The customer's single shopping cart (temporary, mutable).
- Derive subtotal + item count from CartItems at live product prices.

Rules:
- Exactly one cart per customer (one-to-one).
- Read by the order intent builder at checkout, never written by it.
- Emptied (items deleted, cart row kept) after a payment is verified.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class Cart(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    @property
    def item_count(self) -> int:
        return sum(int(item.quantity or 0) for item in self.items.all())

    @property
    def subtotal_amount(self) -> Decimal:
        subtotal = Decimal("0.00")
        for item in self.items.all():
            subtotal += item.line_total
        return subtotal

    @property
    def is_empty(self) -> bool:
        return not self.items.exists()

    def __str__(self):
        return f"Cart {self.id} | {self.customer}"
