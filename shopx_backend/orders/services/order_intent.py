# orders/services/order_intent.py

"""
======================================================
PATH: orders/services/order_intent.py
======================================================
ORDER INTENT BUILDER

Turns the customer's cart into a pending Order plus a gateway order
the client can pay against.

Checks (in order, first failure wins):
1) shipping address complete                -> InvalidInput
2) cart has items                           -> InvalidState("Cart is empty")
3) every product exists and is active       -> NotFound / Unavailable
4) every quantity fits current stock        -> InsufficientStock

Money:
- unit price = product's effective price, captured on each OrderItem
- total      = sum(unit_price * quantity), never recomputed afterwards
- gateway amount = total * 100, half-up to integer subunits
- commission = total * SHOPX["COMMISSION_RATE"], 2dp half-up (stored only)

Two-phase creation:
- the gateway order is created FIRST (nothing local on gateway failure)
- then Order + items in one transaction; a local failure after a
  successful gateway call logs the orphaned gateway order id at ERROR
- stock is NOT touched here; it is settled on payment confirmation
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import transaction

from cart.services.cart_snapshot import CartNotFound, read_cart_snapshot
from orders.models import Order, OrderItem
from orders.services.exceptions import (
    InsufficientStock,
    InvalidInput,
    InvalidState,
    NotFound,
    Unavailable,
)
from storefront.services.razorpay import create_gateway_order, get_key_id, to_subunits

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

REQUIRED_ADDRESS_FIELDS = ("street", "city", "state", "postal_code")


@dataclass(frozen=True)
class OrderIntent:
    order_id: str
    order_no: str
    gateway_order_id: str
    amount_subunits: int
    currency: str
    gateway_public_key: str

    def as_dict(self) -> dict:
        return asdict(self)


# ============================================================
# HELPERS
# ============================================================


def _storefront_cfg() -> dict:
    return getattr(settings, "SHOPX", {}) or {}


def compute_commission(total: Decimal) -> Decimal:
    rate = Decimal(str(_storefront_cfg().get("COMMISSION_RATE") or "0.02"))
    return (Decimal(total) * rate).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def normalize_shipping_address(shipping_address) -> dict:
    if not isinstance(shipping_address, dict) or not shipping_address:
        raise InvalidInput("Shipping address is required.")

    address = {}
    missing = []
    for field in REQUIRED_ADDRESS_FIELDS:
        value = str(shipping_address.get(field) or "").strip()
        if not value:
            missing.append(field)
        address[field] = value

    if missing:
        raise InvalidInput(f"Shipping address is incomplete: missing {', '.join(missing)}.")

    country = str(shipping_address.get("country") or "").strip()
    address["country"] = country or _storefront_cfg().get("DEFAULT_COUNTRY") or "India"
    return address


def _check_availability(snapshot) -> None:
    for line in snapshot.lines:
        product = line.product
        if product is None:
            raise NotFound(f"Product {line.product_id} no longer exists.")
        if not product.is_active:
            raise Unavailable(f"{product.name} is no longer available.")


def _check_stock(snapshot) -> None:
    for line in snapshot.lines:
        product = line.product
        if line.quantity > int(product.stock):
            raise InsufficientStock(
                f"Insufficient stock for {product.name}. Available: {product.stock}",
                product_id=product.pk,
                available=int(product.stock),
            )


def _price_lines(snapshot) -> list[dict]:
    _check_availability(snapshot)
    _check_stock(snapshot)

    priced = []
    for line in snapshot.lines:
        product = line.product
        unit_price = Decimal(product.effective_price).quantize(TWOPLACES)
        priced.append(
            {
                "product": product,
                "seller_id": product.seller_id,
                "quantity": int(line.quantity),
                "unit_price": unit_price,
                "line_total": (unit_price * line.quantity).quantize(TWOPLACES),
            }
        )
    return priced


# ============================================================
# SERVICE
# ============================================================


def create_order_intent(*, customer, shipping_address) -> OrderIntent:
    address = normalize_shipping_address(shipping_address)

    try:
        snapshot = read_cart_snapshot(customer=customer)
    except CartNotFound as exc:
        raise InvalidState("Cart is empty") from exc

    lines = _price_lines(snapshot)

    total = sum((line["line_total"] for line in lines), Decimal("0.00"))
    commission = compute_commission(total)
    currency = (_storefront_cfg().get("CURRENCY") or "INR").upper()
    amount_subunits = to_subunits(total)
    order_no = Order.generate_order_no()

    gateway_order = create_gateway_order(
        amount_subunits=amount_subunits,
        currency=currency,
        receipt=order_no,
    )
    gateway_order_id = gateway_order["id"]

    try:
        with transaction.atomic():
            order = Order.objects.create(
                order_no=order_no,
                customer=customer,
                total_amount=total,
                commission_amount=commission,
                currency=currency,
                gateway_order_id=gateway_order_id,
                status=Order.STATUS_PENDING,
                **address,
            )
            for line in lines:
                OrderItem.objects.create(
                    order=order,
                    product=line["product"],
                    seller_id=line["seller_id"],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                )
    except Exception:
        logger.exception(
            "Orphaned gateway order: local order creation failed",
            extra={
                "gateway_order_id": gateway_order_id,
                "order_no": order_no,
                "customer_id": str(customer.pk),
                "amount_subunits": amount_subunits,
            },
        )
        raise

    logger.info(
        "Order intent created",
        extra={
            "order_id": str(order.id),
            "order_no": order.order_no,
            "gateway_order_id": gateway_order_id,
            "amount_subunits": amount_subunits,
        },
    )

    return OrderIntent(
        order_id=str(order.id),
        order_no=order.order_no,
        gateway_order_id=gateway_order_id,
        amount_subunits=amount_subunits,
        currency=currency,
        gateway_public_key=get_key_id(),
    )
