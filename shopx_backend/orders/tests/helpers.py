# orders/tests/helpers.py

"""
Shared seeding helpers for order/payment tests.
"""

from __future__ import annotations

import itertools
from decimal import Decimal

from django.contrib.auth import get_user_model

from cart.models import Cart, CartItem
from orders.models import Order, OrderItem
from products.models import Product
from storefront.services.razorpay import generate_signature

User = get_user_model()

TEST_KEY_SECRET = "test_key_secret"

RAZORPAY_TEST_SETTINGS = {
    "RAZORPAY": {
        "KEY_ID": "rzp_test_key",
        "KEY_SECRET": TEST_KEY_SECRET,
        "API_BASE": "https://api.razorpay.test/v1",
        "TIMEOUT": 5,
    }
}

SHIPPING_ADDRESS = {
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "postal_code": "560001",
}

_seq = itertools.count(1)


def make_user(*, role=None, email=None):
    n = next(_seq)
    return User.objects.create_user(
        email=email or f"user{n}@example.com",
        password="pass",
        role=role or User.ROLE_CUSTOMER,
    )


def make_product(*, seller, price="100.00", stock=10, discounted_price=None, name=None):
    n = next(_seq)
    return Product.objects.create(
        seller=seller,
        name=name or f"Product {n}",
        slug=f"product-{n}",
        price=Decimal(price),
        discounted_price=Decimal(discounted_price) if discounted_price is not None else None,
        stock=stock,
    )


def fill_cart(*, customer, lines):
    cart, _ = Cart.objects.get_or_create(customer=customer)
    for product, quantity in lines:
        CartItem.objects.create(cart=cart, product=product, quantity=quantity)
    return cart


def make_pending_order(*, customer, lines, gateway_order_id=None):
    """
    Pending order with captured line prices, as the intent builder leaves it.
    """
    total = sum((Decimal(p.effective_price) * q for p, q in lines), Decimal("0.00"))
    order = Order.objects.create(
        customer=customer,
        total_amount=total,
        commission_amount=(total * Decimal("0.02")).quantize(Decimal("0.01")),
        gateway_order_id=gateway_order_id or f"order_GW{next(_seq)}",
        **SHIPPING_ADDRESS,
    )
    for product, quantity in lines:
        OrderItem.objects.create(
            order=order,
            product=product,
            seller=product.seller,
            quantity=quantity,
            unit_price=product.effective_price,
        )
    return order


def sign(gateway_order_id: str, gateway_payment_id: str) -> str:
    return generate_signature(
        gateway_order_id=gateway_order_id,
        gateway_payment_id=gateway_payment_id,
        secret=TEST_KEY_SECRET,
    )


def fake_gateway_order(*, amount_subunits, currency, receipt):
    return {"id": f"order_{receipt}", "amount": amount_subunits, "currency": currency}
