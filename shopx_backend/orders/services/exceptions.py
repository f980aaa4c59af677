# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

Centralized domain errors for the order/payment core.

Every error carries:
- code:        stable machine-readable kind (clients switch on it)
- http_status: status the REST layer answers with

Messages are human-readable and never include stack traces,
expected signatures or internal identifiers.
"""

from __future__ import annotations


class OrderServiceError(Exception):
    """Base exception for all order/payment core failures."""

    code = "order_error"
    http_status = 400


class InvalidInput(OrderServiceError):
    """Missing/malformed shipping address or request body (client-correctable)."""

    code = "invalid_input"
    http_status = 400


class InvalidState(OrderServiceError):
    """Empty cart, or an order not in a state that permits the transition."""

    code = "invalid_state"
    http_status = 409


class NotFound(OrderServiceError):
    """Referenced order/product/customer/cart does not exist."""

    code = "not_found"
    http_status = 404


class Unavailable(OrderServiceError):
    """Product exists but is deactivated."""

    code = "unavailable"
    http_status = 409


class InsufficientStock(OrderServiceError):
    """Requested quantity exceeds available stock."""

    code = "insufficient_stock"
    http_status = 409

    def __init__(self, message: str, *, product_id=None, available: int | None = None):
        super().__init__(message)
        self.product_id = product_id
        self.available = available


class SignatureInvalid(OrderServiceError):
    """Payment callback failed its authenticity check."""

    code = "signature_invalid"
    http_status = 400


class GatewayError(OrderServiceError):
    """The payment gateway call failed or timed out (retryable)."""

    code = "gateway_error"
    http_status = 502
