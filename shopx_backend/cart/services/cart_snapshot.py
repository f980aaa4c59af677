# cart/services/cart_snapshot.py

"""
======================================================
PATH: cart/services/cart_snapshot.py
======================================================
CART SNAPSHOT READER

Purpose:
- Return the customer's cart with every line's product resolved to its
  live record, for the order intent builder.

Rules:
- Read-only: never mutates the cart or products.
- No cart row at all  -> CartNotFound
- Cart with no items  -> InvalidState("Cart is empty")
- Product availability and stock are NOT judged here; the caller checks
  them against the live product carried on each line.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from cart.models import Cart
from orders.services.exceptions import InvalidState, NotFound


class CartNotFound(NotFound):
    pass


@dataclass(frozen=True)
class CartLine:
    product: object
    quantity: int

    @property
    def product_id(self):
        return self.product.pk


@dataclass(frozen=True)
class CartSnapshot:
    cart_id: object
    customer_id: object
    lines: tuple

    @property
    def subtotal(self) -> Decimal:
        total = Decimal("0.00")
        for line in self.lines:
            total += line.product.effective_price * line.quantity
        return total


def read_cart_snapshot(*, customer) -> CartSnapshot:
    cart = Cart.objects.filter(customer=customer).first()
    if cart is None:
        raise CartNotFound("No cart found for this customer.")

    lines = tuple(
        CartLine(product=item.product, quantity=int(item.quantity))
        for item in cart.items.select_related("product")
    )
    if not lines:
        raise InvalidState("Cart is empty")

    return CartSnapshot(cart_id=cart.id, customer_id=customer.pk, lines=lines)
