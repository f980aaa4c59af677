# orders/signals.py

"""
ORDER DOMAIN SIGNALS

order_confirmed
- sent once per order, after the confirming transaction commits
- kwargs: order (orders.Order)
- receivers must never affect payment confirmation
"""

from django.dispatch import Signal

order_confirmed = Signal()
