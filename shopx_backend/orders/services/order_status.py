# orders/services/order_status.py

"""
======================================================
PATH: orders/services/order_status.py
======================================================
ORDER STATUS MANAGEMENT

- update_order_status(): staff (admin/seller) fulfilment moves
- cancel_order():        cancel + restore stock exactly once
- expire_pending_orders(): reclaim pending orders nobody paid for

Rules:
- "confirmed" is reserved for payment verification
- sellers only act on orders that contain one of their items
- every change is validated against orders.services.order_lifecycle
- all writes happen with the order row locked
- re-cancelling is a no-op (no second stock credit)
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from orders.models import Order
from orders.services.exceptions import InvalidInput, InvalidState, NotFound
from orders.services.order_lifecycle import validate_transition
from products.services.inventory import restore_stock_for_order
from users.models import User

logger = logging.getLogger(__name__)

STAFF_TARGET_STATUSES = {
    Order.STATUS_PROCESSING,
    Order.STATUS_SHIPPED,
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
}

EXPIRED_REASON = "expired"


def _lock_order(order_id) -> Order:
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFound("Order not found.")
    return order


def orders_visible_to(user):
    """
    Orders a user may see: admins see all, sellers see orders holding
    at least one of their items, everyone else only their own.
    """
    role = getattr(user, "role", None)
    if role == User.ROLE_ADMIN:
        return Order.objects.all()
    if role == User.ROLE_SELLER:
        return Order.objects.filter(pk__in=Order.objects.filter(items__seller=user).values("pk"))
    return Order.objects.filter(customer=user)


def _cancel_locked(*, order: Order, reason: str) -> Order:
    validate_transition(order=order, target_status=Order.STATUS_CANCELLED)

    restore_stock_for_order(order=order)

    order.status = Order.STATUS_CANCELLED
    order.cancellation_reason = (reason or "")[:255]
    order.cancelled_at = timezone.now()
    order.save(
        update_fields=[
            "status",
            "cancellation_reason",
            "cancelled_at",
            "stock_restored_at",
            "updated_at",
        ]
    )

    logger.info(
        "Order cancelled",
        extra={
            "order_id": str(order.id),
            "reason": order.cancellation_reason,
            "stock_restored": bool(order.stock_restored_at),
        },
    )
    return order


def cancel_order(*, order, reason: str = "") -> Order:
    """
    Cancel an order, crediting stock back when it had been deducted.

    Already cancelled -> returned unchanged.
    Delivered         -> InvalidState.
    """
    order_id = getattr(order, "pk", order)

    with transaction.atomic():
        locked = _lock_order(order_id)
        if locked.status == Order.STATUS_CANCELLED:
            logger.info("Order already cancelled", extra={"order_id": str(locked.id)})
            return locked
        return _cancel_locked(order=locked, reason=reason)


def update_order_status(*, order_id, target_status, actor) -> Order:
    target = str(target_status or "").strip().lower()

    if target == Order.STATUS_CONFIRMED:
        raise InvalidState("Orders are confirmed only through payment verification.")

    if target not in STAFF_TARGET_STATUSES:
        raise InvalidInput(f"Invalid status '{target_status}'.")

    if not orders_visible_to(actor).filter(pk=order_id).exists():
        raise NotFound("Order not found.")

    if target == Order.STATUS_CANCELLED:
        role = getattr(actor, "role", "staff")
        return cancel_order(order=order_id, reason=f"cancelled by {role}")

    with transaction.atomic():
        order = _lock_order(order_id)
        validate_transition(order=order, target_status=target)

        previous = order.status
        order.status = target
        order.save(update_fields=["status", "updated_at"])

    logger.info(
        "Order status updated",
        extra={
            "order_id": str(order.id),
            "from_status": previous,
            "to_status": target,
            "actor_id": str(getattr(actor, "pk", "")),
        },
    )
    return order


def expire_pending_orders(*, older_than: timedelta) -> int:
    """
    Cancel pending orders created before now - older_than.

    Pending orders never had stock deducted, so nothing is restored.
    Each order is re-checked under lock: one confirmed by a payment
    in the meantime is left alone.
    """
    cutoff = timezone.now() - older_than
    candidate_ids = list(
        Order.objects.filter(status=Order.STATUS_PENDING, created_at__lt=cutoff)
        .order_by("created_at")
        .values_list("id", flat=True)
    )

    expired = 0
    for order_id in candidate_ids:
        with transaction.atomic():
            order = Order.objects.select_for_update().filter(pk=order_id).first()
            if order is None or order.status != Order.STATUS_PENDING:
                continue
            _cancel_locked(order=order, reason=EXPIRED_REASON)
            expired += 1

    if expired:
        logger.info("Expired pending orders", extra={"count": expired, "cutoff": cutoff.isoformat()})
    return expired
