r"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Order entities.

    pending -> confirmed -> processing -> shipped -> delivered
       \___________\______________\___________\______-> cancelled

- Forward moves may skip fulfilment steps, never go back.
- pending can only move to confirmed (payment) or cancelled.
- delivered and cancelled are terminal.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
"""

from orders.models import Order
from orders.services.exceptions import InvalidState

# ============================================================
# DOMAIN ERRORS
# ============================================================


class InvalidOrderTransitionError(InvalidState):
    pass


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_CONFIRMED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_CONFIRMED: {
        Order.STATUS_PROCESSING,
        Order.STATUS_SHIPPED,
        Order.STATUS_DELIVERED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_PROCESSING: {
        Order.STATUS_SHIPPED,
        Order.STATUS_DELIVERED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_SHIPPED: {
        Order.STATUS_DELIVERED,
        Order.STATUS_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: Order, target_status: str):
    if not can_transition(
        from_status=order.status,
        to_status=target_status,
    ):
        raise InvalidOrderTransitionError(
            f"Order {order.order_no} cannot transition from "
            f"'{order.status}' to '{target_status}'"
        )
