# notifications/services/email.py

"""
======================================================
PATH: notifications/services/email.py
======================================================
NOTIFICATION DISPATCHER

notify(recipient, template_kind, parameters)

- Renders notifications/<template_kind>.txt (+ .html when present)
- Sends through Django's configured email backend (send_mail)
- Best-effort: every failure is logged and reported as False,
  never raised. Callers are on the far side of a committed payment.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)

TEMPLATE_SUBJECTS = {
    "order_confirmed": "Order confirmed: {order_no}",
}


def notify(recipient: str, template_kind: str, parameters: dict) -> bool:
    recipient = (recipient or "").strip()
    if not recipient:
        logger.warning("Notification skipped: no recipient", extra={"template_kind": template_kind})
        return False

    subject_template = TEMPLATE_SUBJECTS.get(template_kind)
    if subject_template is None:
        logger.warning("Unknown notification template", extra={"template_kind": template_kind})
        return False

    try:
        subject = subject_template.format(**parameters)
        text_body = render_to_string(f"notifications/{template_kind}.txt", parameters)
        try:
            html_body = render_to_string(f"notifications/{template_kind}.html", parameters)
        except TemplateDoesNotExist:
            html_body = None

        send_mail(
            subject=subject,
            message=text_body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            html_message=html_body,
            fail_silently=False,
        )
    except Exception:
        logger.exception(
            "Notification delivery failed",
            extra={"template_kind": template_kind, "recipient": recipient},
        )
        return False

    logger.info("Notification sent", extra={"template_kind": template_kind, "recipient": recipient})
    return True
