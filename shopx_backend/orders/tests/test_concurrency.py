# orders/tests/test_concurrency.py

"""
Stock safety under competing confirmations and cancellations.
"""

import random
import threading
import unittest
from unittest.mock import patch

from django.db import connection, connections
from django.test import TestCase, TransactionTestCase, override_settings

from orders.models import Order
from orders.services.exceptions import InsufficientStock, InvalidState
from orders.services.order_intent import create_order_intent
from orders.services.order_status import cancel_order
from orders.services.payment_verifier import verify_payment
from products.models import Product
from users.models import User

from .helpers import (
    RAZORPAY_TEST_SETTINGS,
    SHIPPING_ADDRESS,
    fake_gateway_order,
    fill_cart,
    make_pending_order,
    make_product,
    make_user,
    sign,
)


def _pay(order, payment_id):
    return verify_payment(
        customer=order.customer,
        order_id=order.id,
        gateway_order_id=order.gateway_order_id,
        gateway_payment_id=payment_id,
        gateway_signature=sign(order.gateway_order_id, payment_id),
    )


@override_settings(PAYMENTS=RAZORPAY_TEST_SETTINGS)
class LastUnitRaceTests(TestCase):
    """
    Two customers both pass the checkout stock check for the last unit
    (stale read); only the first payment confirmation may take it.
    """

    def test_second_confirmation_fails_cleanly(self):
        seller = make_user(role=User.ROLE_SELLER)
        product = make_product(seller=seller, stock=1)
        alice, bob = make_user(), make_user()

        intents = []
        with patch("orders.services.order_intent.create_gateway_order", side_effect=fake_gateway_order):
            for customer in (alice, bob):
                fill_cart(customer=customer, lines=[(product, 1)])
                intents.append(create_order_intent(customer=customer, shipping_address=SHIPPING_ADDRESS))

        first = Order.objects.get(pk=intents[0].order_id)
        second = Order.objects.get(pk=intents[1].order_id)

        _pay(first, "pay_alice")

        with self.assertLogs("orders.services.payment_verifier", level="ERROR"):
            with self.assertRaises(InsufficientStock):
                _pay(second, "pay_bob")

        product.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual(product.stock, 0)
        self.assertEqual(second.status, Order.STATUS_PENDING)


@override_settings(PAYMENTS=RAZORPAY_TEST_SETTINGS)
class RandomizedSettlementTests(TestCase):
    """
    Random interleaving of confirmations and cancellations.

    Invariants after every step:
    - stock >= 0
    - stock + units held by confirmed-and-not-restored orders == initial stock
    """

    INITIAL_STOCK = 7

    def _held_units(self, product):
        held = 0
        for order in Order.objects.filter(stock_deducted_at__isnull=False, stock_restored_at__isnull=True):
            held += sum(item.quantity for item in order.items.filter(product=product))
        return held

    def test_stock_is_conserved(self):
        rng = random.Random(20240611)
        seller = make_user(role=User.ROLE_SELLER)
        product = make_product(seller=seller, stock=self.INITIAL_STOCK)

        orders = [
            make_pending_order(customer=make_user(), lines=[(product, rng.randint(1, 3))])
            for _ in range(12)
        ]

        for step in range(60):
            order = rng.choice(orders)
            order.refresh_from_db()
            action = rng.choice(["pay", "pay", "cancel"])

            try:
                if action == "pay":
                    _pay(order, f"pay_{order.gateway_order_id}")
                else:
                    cancel_order(order=order, reason="random")
            except (InsufficientStock, InvalidState):
                pass

            product.refresh_from_db()
            self.assertGreaterEqual(product.stock, 0, f"step {step}")
            self.assertEqual(
                product.stock + self._held_units(product),
                self.INITIAL_STOCK,
                f"step {step}",
            )


@unittest.skipUnless(connection.vendor == "postgresql", "row locking needs PostgreSQL")
@override_settings(PAYMENTS=RAZORPAY_TEST_SETTINGS)
class ThreadedConfirmationTests(TransactionTestCase):
    def test_parallel_confirmations_never_oversell(self):
        seller = make_user(role=User.ROLE_SELLER)
        product = make_product(seller=seller, stock=3)
        orders = [make_pending_order(customer=make_user(), lines=[(product, 1)]) for _ in range(6)]

        barrier = threading.Barrier(len(orders))
        outcomes = []
        lock = threading.Lock()

        def worker(order):
            try:
                barrier.wait()
                try:
                    _pay(order, f"pay_{order.gateway_order_id}")
                    result = "ok"
                except InsufficientStock:
                    result = "short"
                with lock:
                    outcomes.append(result)
            finally:
                connections.close_all()

        threads = [threading.Thread(target=worker, args=(o,)) for o in orders]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        product.refresh_from_db()
        self.assertEqual(outcomes.count("ok"), 3)
        self.assertEqual(outcomes.count("short"), 3)
        self.assertEqual(product.stock, 0)
        self.assertEqual(Product.objects.filter(stock__lt=0).count(), 0)
