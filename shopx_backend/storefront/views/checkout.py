# storefront/views/checkout.py
"""
CHECKOUT (CUSTOMER)

Flow:
1) POST /api/orders/create/  -> pending Order + gateway order (client opens checkout widget)
2) POST /api/orders/verify/  -> gateway callback fields; confirms the order

Security hardening:
- Customer-only, JWT authenticated
- Throttled (checkout scope) because both endpoints call out / write
- Signature checked server-side; the client never decides payment success
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle
from rest_framework.views import APIView

from orders.services.exceptions import OrderServiceError
from orders.services.order_intent import create_order_intent
from orders.services.payment_verifier import verify_payment
from storefront.serializers import (
    CreateOrderInputSerializer,
    OrderIntentResponseSerializer,
    OrderSerializer,
    VerifyPaymentInputSerializer,
)
from storefront.views.errors import invalid_input_response, service_error_response
from users.permissions import IsCustomer


class CheckoutThrottle(UserRateThrottle):
    """
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['checkout'].
    """

    scope = "checkout"


class CreateOrderView(APIView):
    permission_classes = [IsCustomer]
    parser_classes = [JSONParser]
    throttle_classes = [CheckoutThrottle]

    @extend_schema(
        request=CreateOrderInputSerializer,
        responses={
            201: OrderIntentResponseSerializer,
            400: OpenApiResponse(description="invalid_input"),
            404: OpenApiResponse(description="not_found"),
            409: OpenApiResponse(description="invalid_state / unavailable / insufficient_stock"),
            502: OpenApiResponse(description="gateway_error (retryable)"),
        },
        description="Create a pending order from the cart and a matching gateway order.",
        tags=["Orders"],
    )
    def post(self, request):
        s = CreateOrderInputSerializer(data=request.data)
        if not s.is_valid():
            return invalid_input_response(s)

        try:
            intent = create_order_intent(
                customer=request.user,
                shipping_address=dict(s.validated_data["shipping_address"]),
            )
        except OrderServiceError as exc:
            return service_error_response(exc)

        return Response(intent.as_dict(), status=status.HTTP_201_CREATED)


class VerifyPaymentView(APIView):
    permission_classes = [IsCustomer]
    parser_classes = [JSONParser]
    throttle_classes = [CheckoutThrottle]

    @extend_schema(
        request=VerifyPaymentInputSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="invalid_input / signature_invalid"),
            404: OpenApiResponse(description="not_found"),
            409: OpenApiResponse(description="invalid_state / insufficient_stock"),
        },
        description=(
            "Verify the gateway payment callback and confirm the order. "
            "Repeating a successful verification returns the same order."
        ),
        tags=["Orders"],
    )
    def post(self, request):
        s = VerifyPaymentInputSerializer(data=request.data)
        if not s.is_valid():
            return invalid_input_response(s)

        data = s.validated_data
        try:
            order = verify_payment(
                customer=request.user,
                order_id=data["order_id"],
                gateway_order_id=data["gateway_order_id"],
                gateway_payment_id=data["gateway_payment_id"],
                gateway_signature=data["gateway_signature"],
            )
        except OrderServiceError as exc:
            return service_error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)
