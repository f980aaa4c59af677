# orders/models/__init__.py

"""
ORDERS MODELS PACKAGE EXPORTS
"""

from .order import Order
from .order_item import OrderItem
from .payment_record import PaymentRecord

__all__ = [
    "Order",
    "OrderItem",
    "PaymentRecord",
]
