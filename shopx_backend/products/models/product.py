# products/models/product.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Product(models.Model):
    """
    Represents a sellable product listed by a seller.

    STOCK MODEL (IMPORTANT):
    - stock is a shared counter mutated ONLY by products.services.inventory
      (conditional UPDATEs, never read-then-write in Python)
    - stock can never go negative (DB check constraint)

    PRICING:
    - price is the list price
    - discounted_price is honoured only when it is set AND lower than price
    - the price a customer pays is snapshotted on the order line at checkout
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=120, blank=True, default="")

    price = models.DecimalField(max_digits=12, decimal_places=2)
    discounted_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
    )

    stock = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["category", "price"], name="product_category_price_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock__gte=0),
                name="product_stock_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.slug})"

    def clean(self):
        if self.price is None or Decimal(self.price) <= Decimal("0.00"):
            raise ValidationError({"price": "Price must be greater than zero"})

        if self.discounted_price is not None and Decimal(self.discounted_price) < Decimal("0.00"):
            raise ValidationError({"discounted_price": "Discounted price cannot be negative"})

    @property
    def effective_price(self) -> Decimal:
        price = Decimal(self.price)
        if self.discounted_price is not None:
            discounted = Decimal(self.discounted_price)
            if Decimal("0.00") < discounted < price:
                return discounted
        return price
