# orders/services/payment_verifier.py

"""
======================================================
PATH: orders/services/payment_verifier.py
======================================================
PAYMENT VERIFIER

Confirms a pending order from the gateway's payment callback.

Authenticity:
- signature = hex HMAC-SHA256(key_secret, "<gateway_order_id>|<gateway_payment_id>")
- constant-time comparison; mismatch -> SignatureInvalid, nothing written

Settlement (ONE transaction, order row locked):
1) load order scoped to the customer, gateway order id must match
2) already recorded for this payment id -> return order (no-op)
3) order must be pending
4) deduct stock (conditional, per product)
5) order -> confirmed (+ payment id, confirmed_at, stock_deducted_at)
6) PaymentRecord (captured)
7) clear the customer's cart

After commit:
- orders.signals.order_confirmed is sent; receivers cannot fail the call

Failure after capture:
- the gateway already holds the customer's money when we get here, so a
  stock shortfall or a non-pending order is logged at ERROR for a manual
  refund. The transaction is rolled back and the order is left untouched.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from cart.models import CartItem
from orders.models import Order, PaymentRecord
from orders.services.exceptions import (
    InsufficientStock,
    InvalidInput,
    InvalidState,
    NotFound,
    SignatureInvalid,
)
from orders.services.order_lifecycle import validate_transition
from orders.signals import order_confirmed
from products.services.inventory import InsufficientStockError, deduct_stock_for_order
from storefront.services.razorpay import verify_payment_signature

logger = logging.getLogger(__name__)


# ============================================================
# HELPERS
# ============================================================


def _emit_order_confirmed(order_id) -> None:
    order = Order.objects.select_related("customer").filter(pk=order_id).first()
    if order is None:
        return

    for receiver, response in order_confirmed.send_robust(sender=Order, order=order):
        if isinstance(response, Exception):
            logger.error(
                "order_confirmed receiver failed",
                extra={"order_id": str(order_id), "receiver": getattr(receiver, "__name__", repr(receiver))},
                exc_info=(type(response), response, response.__traceback__),
            )


def _is_recorded(*, order: Order, gateway_payment_id: str) -> bool:
    if PaymentRecord.objects.filter(order=order, gateway_payment_id=gateway_payment_id).exists():
        return True
    return (
        order.status != Order.STATUS_PENDING
        and order.gateway_payment_id == gateway_payment_id
    )


def _settle(*, customer, order_id, gateway_order_id, gateway_payment_id, gateway_signature) -> Order:
    with transaction.atomic():
        order = (
            Order.objects.select_for_update()
            .filter(pk=order_id, customer=customer)
            .first()
        )
        if order is None:
            raise NotFound("Order not found.")

        if order.gateway_order_id != gateway_order_id:
            raise InvalidInput("Gateway order id does not match this order.")

        if _is_recorded(order=order, gateway_payment_id=gateway_payment_id):
            logger.info(
                "Duplicate payment confirmation ignored",
                extra={"order_id": str(order.id), "gateway_payment_id": gateway_payment_id},
            )
            return order

        if order.status != Order.STATUS_PENDING:
            logger.error(
                "Captured payment needs refund: order is not pending",
                extra={
                    "order_id": str(order.id),
                    "status": order.status,
                    "gateway_payment_id": gateway_payment_id,
                },
            )
            raise InvalidState(f"Order is {order.status} and cannot be confirmed.")

        validate_transition(order=order, target_status=Order.STATUS_CONFIRMED)

        try:
            deduct_stock_for_order(order=order)
        except InsufficientStockError as exc:
            logger.error(
                "Captured payment needs refund: stock settlement failed",
                extra={
                    "order_id": str(order.id),
                    "gateway_payment_id": gateway_payment_id,
                    "product_id": str(exc.product_id),
                    "requested": exc.requested,
                    "available": exc.available,
                },
            )
            raise InsufficientStock(
                f"Insufficient stock for {exc.product_name}. Available: {exc.available}",
                product_id=exc.product_id,
                available=exc.available,
            ) from exc

        order.status = Order.STATUS_CONFIRMED
        order.gateway_payment_id = gateway_payment_id
        order.confirmed_at = timezone.now()
        order.save(
            update_fields=[
                "status",
                "gateway_payment_id",
                "confirmed_at",
                "stock_deducted_at",
                "updated_at",
            ]
        )

        PaymentRecord.objects.create(
            order=order,
            customer=customer,
            gateway_order_id=gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            gateway_signature=gateway_signature,
            amount=order.total_amount,
            currency=order.currency,
            status=PaymentRecord.STATUS_CAPTURED,
        )

        CartItem.objects.filter(cart__customer=customer).delete()

        confirmed_id = order.id
        transaction.on_commit(lambda: _emit_order_confirmed(confirmed_id))

    logger.info(
        "Order confirmed",
        extra={"order_id": str(order.id), "gateway_payment_id": gateway_payment_id},
    )
    return order


# ============================================================
# SERVICE
# ============================================================


def verify_payment(
    *,
    customer,
    order_id,
    gateway_order_id: str,
    gateway_payment_id: str,
    gateway_signature: str,
) -> Order:
    gateway_order_id = str(gateway_order_id or "").strip()
    gateway_payment_id = str(gateway_payment_id or "").strip()
    gateway_signature = str(gateway_signature or "").strip()

    if not (order_id and gateway_order_id and gateway_payment_id and gateway_signature):
        raise InvalidInput("order_id, gateway_order_id, gateway_payment_id and gateway_signature are required.")

    if not verify_payment_signature(
        gateway_order_id=gateway_order_id,
        gateway_payment_id=gateway_payment_id,
        signature=gateway_signature,
    ):
        logger.warning(
            "Payment signature mismatch",
            extra={
                "order_id": str(order_id),
                "customer_id": str(customer.pk),
                "gateway_order_id": gateway_order_id,
                "gateway_payment_id": gateway_payment_id,
            },
        )
        raise SignatureInvalid("Payment verification failed: invalid signature.")

    try:
        return _settle(
            customer=customer,
            order_id=order_id,
            gateway_order_id=gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            gateway_signature=gateway_signature,
        )
    except IntegrityError as exc:
        # a concurrent confirmation of the same payment committed first
        order = Order.objects.filter(
            pk=order_id,
            customer=customer,
            gateway_payment_id=gateway_payment_id,
        ).first()
        if order is None:
            logger.error(
                "Payment id already recorded against another order",
                extra={"order_id": str(order_id), "gateway_payment_id": gateway_payment_id},
            )
            raise InvalidState("This payment has already been recorded.") from exc
        logger.info(
            "Duplicate payment confirmation lost unique race",
            extra={"order_id": str(order.id), "gateway_payment_id": gateway_payment_id},
        )
        return order
