# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
INVENTORY SETTLEMENT

Purpose:
- Apply stock deltas triggered by order state transitions.
  - confirmation: stock -= quantity (per line)
  - cancellation: stock += quantity (per line), once per order

Rules:
- Stock is mutated with a single conditional UPDATE per product:
      UPDATE product SET stock = stock - qty WHERE id = ? AND stock >= qty
  Zero affected rows means the counter moved under us -> InsufficientStockError.
  There is no read-then-write in Python, so concurrent confirmations can
  never drive stock negative.
- Products are touched in primary-key order so two settlements that share
  products always lock rows in the same order.
- Callers own the transaction: these helpers must run inside
  transaction.atomic() so a shortfall on line N rolls back lines 1..N-1.
- Once-per-order is tracked on the order itself
  (stock_deducted_at / stock_restored_at markers).
"""

from __future__ import annotations

import logging
from collections import defaultdict

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from products.models import Product

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================

class InsufficientStockError(Exception):
    def __init__(self, *, product_id, product_name: str, requested: int, available: int):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Requested: {requested}, Available: {available}"
        )


def _aggregate_lines(lines) -> list[tuple]:
    """
    Collapse (product_id, quantity) pairs so a product listed twice is
    settled with a single conditional update. Sorted by product id.
    """
    totals: dict = defaultdict(int)
    for product_id, quantity in lines:
        qty = int(quantity or 0)
        if qty <= 0:
            continue
        totals[product_id] += qty
    return sorted(totals.items(), key=lambda pair: str(pair[0]))


def _order_lines(order) -> list[tuple]:
    return [(item.product_id, item.quantity) for item in order.items.all()]


# ============================================================
# PRIMITIVES
# ============================================================

def deduct_stock(*, lines) -> None:
    """
    Compare-and-decrement stock for every (product_id, quantity) line.
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("deduct_stock() must run inside transaction.atomic()")

    for product_id, qty in _aggregate_lines(lines):
        updated = Product.objects.filter(pk=product_id, stock__gte=qty).update(
            stock=F("stock") - qty,
            updated_at=timezone.now(),
        )
        if updated:
            continue

        current = Product.objects.filter(pk=product_id).values("name", "stock").first() or {}
        logger.warning(
            "Stock decrement rejected",
            extra={"product_id": str(product_id), "requested": qty, "available": current.get("stock")},
        )
        raise InsufficientStockError(
            product_id=product_id,
            product_name=current.get("name") or str(product_id),
            requested=qty,
            available=int(current.get("stock") or 0),
        )


def restore_stock(*, lines) -> None:
    for product_id, qty in _aggregate_lines(lines):
        Product.objects.filter(pk=product_id).update(
            stock=F("stock") + qty,
            updated_at=timezone.now(),
        )


# ============================================================
# ORDER SETTLEMENT
# ============================================================

def deduct_stock_for_order(*, order) -> bool:
    """
    Decrement stock for every line of a confirming order.

    Returns False (no-op) when this order was already settled.
    The caller is expected to hold a row lock on the order.
    """
    if order.stock_deducted_at:
        logger.info("Stock already deducted for order", extra={"order_id": str(order.id)})
        return False

    deduct_stock(lines=_order_lines(order))

    order.stock_deducted_at = timezone.now()
    logger.info("Stock deducted for order", extra={"order_id": str(order.id)})
    return True


def restore_stock_for_order(*, order) -> bool:
    """
    Credit stock back for a cancelled order, exactly once.

    - never deducted (e.g. pending order)  -> no-op
    - already restored                     -> no-op
    """
    if not order.stock_deducted_at or order.stock_restored_at:
        return False

    restore_stock(lines=_order_lines(order))

    order.stock_restored_at = timezone.now()
    logger.info("Stock restored for order", extra={"order_id": str(order.id)})
    return True
