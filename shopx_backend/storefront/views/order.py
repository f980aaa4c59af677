# storefront/views/order.py
"""
ORDER QUERIES + STATUS MANAGEMENT

- GET   /api/orders/my/               own orders (customer, paginated, newest first)
- GET   /api/orders/<uuid>/           one order (owner, admin, or a seller with items in it)
- GET   /api/orders/                  every order (admin, paginated)
- GET   /api/seller/orders/           orders holding the seller's items (?status=)
- PATCH /api/orders/<uuid>/status/    fulfilment status (admin / seller with items in it)
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.models import Order
from orders.services.exceptions import OrderServiceError
from orders.services.order_status import orders_visible_to, update_order_status
from storefront.serializers import OrderSerializer, OrderStatusUpdateSerializer
from storefront.views.errors import (
    error_response,
    invalid_input_response,
    service_error_response,
)
from users.permissions import IsAdmin, IsAdminOrSeller


def _order_queryset(base=None):
    return (
        (base if base is not None else Order.objects).select_related("customer")
        .prefetch_related("items__product", "items__seller")
        .order_by("-created_at")
    )


@extend_schema(tags=["Orders"])
class MyOrdersView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer

    def get_queryset(self):
        return _order_queryset().filter(customer=self.request.user)


@extend_schema(tags=["Orders"])
class AllOrdersView(generics.ListAPIView):
    permission_classes = [IsAdmin]
    serializer_class = OrderSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "customer"]

    def get_queryset(self):
        return _order_queryset()


@extend_schema(tags=["Orders"])
class SellerOrdersView(generics.ListAPIView):
    permission_classes = [IsAdminOrSeller]
    serializer_class = OrderSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status"]

    def get_queryset(self):
        holding = Order.objects.filter(items__seller=self.request.user).values("pk")
        return _order_queryset().filter(pk__in=holding)


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        responses={200: OrderSerializer, 404: OpenApiResponse(description="not_found")},
        description="Fetch one order. Customers see their own, sellers those holding their items.",
        tags=["Orders"],
    )
    def get(self, request, order_id):
        # orders outside the caller's scope read as not_found
        order = _order_queryset(orders_visible_to(request.user)).filter(pk=order_id).first()
        if order is None:
            return error_response(
                code="not_found",
                message="Order not found.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class OrderStatusView(APIView):
    permission_classes = [IsAdminOrSeller]

    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="invalid_input"),
            404: OpenApiResponse(description="not_found"),
            409: OpenApiResponse(description="invalid_state"),
        },
        description="Move an order through fulfilment (processing, shipped, delivered, cancelled).",
        tags=["Orders"],
    )
    def patch(self, request, order_id):
        s = OrderStatusUpdateSerializer(data=request.data)
        if not s.is_valid():
            return invalid_input_response(s)

        try:
            order = update_order_status(
                order_id=order_id,
                target_status=s.validated_data["status"],
                actor=request.user,
            )
        except OrderServiceError as exc:
            return service_error_response(exc)

        order = _order_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)
