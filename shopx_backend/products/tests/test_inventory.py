# products/tests/test_inventory.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import transaction
from django.test import TestCase

from products.models import Product
from products.services.inventory import (
    InsufficientStockError,
    deduct_stock,
    restore_stock,
)

User = get_user_model()


class InventoryPrimitiveTests(TestCase):
    """
    Stock counter primitives.

    GUARANTEES:
    - Decrement is conditional (never below zero)
    - A shortfall on any line rolls back the whole settlement
    - Duplicate lines for one product are settled together
    """

    def setUp(self):
        self.seller = User.objects.create_user(
            email="seller@example.com",
            password="pass",
            role=User.ROLE_SELLER,
        )
        self.shirt = Product.objects.create(
            seller=self.seller, name="Shirt", slug="shirt", price=Decimal("300.00"), stock=5
        )
        self.socks = Product.objects.create(
            seller=self.seller, name="Socks", slug="socks", price=Decimal("50.00"), stock=1
        )

    def test_deduct_decrements_each_line(self):
        with transaction.atomic():
            deduct_stock(lines=[(self.shirt.id, 2), (self.socks.id, 1)])

        self.shirt.refresh_from_db()
        self.socks.refresh_from_db()
        self.assertEqual(self.shirt.stock, 3)
        self.assertEqual(self.socks.stock, 0)

    def test_deduct_rejects_when_stock_is_short(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            with transaction.atomic():
                deduct_stock(lines=[(self.socks.id, 2)])

        self.assertEqual(ctx.exception.available, 1)
        self.assertEqual(ctx.exception.requested, 2)
        self.assertIn("Socks", str(ctx.exception))

        self.socks.refresh_from_db()
        self.assertEqual(self.socks.stock, 1)

    def test_shortfall_rolls_back_earlier_lines(self):
        with self.assertRaises(InsufficientStockError):
            with transaction.atomic():
                deduct_stock(lines=[(self.shirt.id, 2), (self.socks.id, 5)])

        self.shirt.refresh_from_db()
        self.assertEqual(self.shirt.stock, 5)

    def test_duplicate_lines_are_aggregated(self):
        with self.assertRaises(InsufficientStockError):
            with transaction.atomic():
                deduct_stock(lines=[(self.shirt.id, 3), (self.shirt.id, 3)])

        self.shirt.refresh_from_db()
        self.assertEqual(self.shirt.stock, 5)

    def test_restore_increments_stock(self):
        restore_stock(lines=[(self.socks.id, 3)])

        self.socks.refresh_from_db()
        self.assertEqual(self.socks.stock, 4)
