# storefront/views/errors.py

"""
API ERROR NORMALIZATION

Every failure leaves the API as:
    {"error": {"code": "<kind>", "message": "<human readable>"}}
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from orders.services.exceptions import OrderServiceError


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def service_error_response(exc: OrderServiceError):
    return error_response(
        code=exc.code,
        message=str(exc),
        http_status=exc.http_status,
    )


def invalid_input_response(serializer):
    field, messages = next(iter(serializer.errors.items()))
    if isinstance(messages, dict):
        sub_field, sub_messages = next(iter(messages.items()))
        field = f"{field}.{sub_field}"
        messages = sub_messages
    message = messages[0] if isinstance(messages, list) and messages else messages
    return error_response(
        code="invalid_input",
        message=f"{field}: {message}",
        http_status=status.HTTP_400_BAD_REQUEST,
    )
