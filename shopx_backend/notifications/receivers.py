# notifications/receivers.py

"""
Receivers for order domain signals (connected in NotificationsConfig.ready).
"""

from __future__ import annotations

import logging

from django.conf import settings

from notifications.services.email import notify

logger = logging.getLogger(__name__)


def send_order_confirmation(sender, order, **kwargs):
    try:
        customer = order.customer
        frontend = (getattr(settings, "FRONTEND_BASE_URL", "") or "").rstrip("/")
        notify(
            customer.email,
            "order_confirmed",
            {
                "customer_name": customer.display_name,
                "order_no": order.order_no,
                "total_amount": order.total_amount,
                "currency": order.currency,
                "orders_url": f"{frontend}/orders/{order.id}",
            },
        )
    except Exception:
        logger.exception(
            "Order confirmation notification failed",
            extra={"order_id": str(getattr(order, "id", ""))},
        )
