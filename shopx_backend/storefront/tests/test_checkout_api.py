# storefront/tests/test_checkout_api.py

from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order, PaymentRecord
from orders.services.exceptions import GatewayError
from orders.tests.helpers import (
    RAZORPAY_TEST_SETTINGS,
    SHIPPING_ADDRESS,
    fake_gateway_order,
    fill_cart,
    make_pending_order,
    make_product,
    make_user,
    sign,
)
from users.models import User

GATEWAY = "orders.services.order_intent.create_gateway_order"


@override_settings(PAYMENTS=RAZORPAY_TEST_SETTINGS)
class CheckoutAPITests(TestCase):
    """
    /api/orders/create/ + /api/orders/verify/

    GUARANTEES:
    - Errors leave as {"error": {"code", "message"}}
    - Only customers check out
    """

    def setUp(self):
        self.client = APIClient()
        self.customer = make_user()
        self.seller = make_user(role=User.ROLE_SELLER)
        self.product = make_product(seller=self.seller, price="199.99", stock=4)
        self.client.force_authenticate(user=self.customer)

    def test_create_returns_intent(self):
        fill_cart(customer=self.customer, lines=[(self.product, 2)])

        with patch(GATEWAY, side_effect=fake_gateway_order):
            res = self.client.post(
                reverse("orders:order-create"),
                {"shipping_address": SHIPPING_ADDRESS},
                format="json",
            )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["amount_subunits"], 39998)
        self.assertEqual(res.data["currency"], "INR")
        self.assertEqual(res.data["gateway_public_key"], "rzp_test_key")
        self.assertTrue(Order.objects.filter(pk=res.data["order_id"]).exists())

    def test_create_with_incomplete_address_is_invalid_input(self):
        fill_cart(customer=self.customer, lines=[(self.product, 1)])

        res = self.client.post(
            reverse("orders:order-create"),
            {"shipping_address": {"street": "12 MG Road"}},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "invalid_input")

    def test_create_with_empty_cart_is_invalid_state(self):
        res = self.client.post(
            reverse("orders:order-create"),
            {"shipping_address": SHIPPING_ADDRESS},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"], {"code": "invalid_state", "message": "Cart is empty"})

    def test_gateway_outage_is_502(self):
        fill_cart(customer=self.customer, lines=[(self.product, 1)])

        with patch(GATEWAY, side_effect=GatewayError("Payment gateway is unreachable. Please retry.")):
            res = self.client.post(
                reverse("orders:order-create"),
                {"shipping_address": SHIPPING_ADDRESS},
                format="json",
            )

        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(res.data["error"]["code"], "gateway_error")

    def test_seller_cannot_check_out(self):
        self.client.force_authenticate(user=self.seller)

        res = self.client.post(
            reverse("orders:order-create"),
            {"shipping_address": SHIPPING_ADDRESS},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_verify_confirms_order(self):
        order = make_pending_order(customer=self.customer, lines=[(self.product, 1)])

        with self.captureOnCommitCallbacks(execute=True):
            res = self.client.post(
                reverse("orders:order-verify"),
                {
                    "order_id": str(order.id),
                    "gateway_order_id": order.gateway_order_id,
                    "gateway_payment_id": "pay_API1",
                    "gateway_signature": sign(order.gateway_order_id, "pay_API1"),
                },
                format="json",
            )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "confirmed")
        self.assertEqual(res.data["gateway_payment_id"], "pay_API1")
        self.assertEqual(PaymentRecord.objects.filter(order=order).count(), 1)

    def test_verify_with_forged_signature(self):
        order = make_pending_order(customer=self.customer, lines=[(self.product, 1)])

        res = self.client.post(
            reverse("orders:order-verify"),
            {
                "order_id": str(order.id),
                "gateway_order_id": order.gateway_order_id,
                "gateway_payment_id": "pay_API1",
                "gateway_signature": "0" * 64,
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "signature_invalid")
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)

    def test_verify_with_malformed_body(self):
        res = self.client.post(reverse("orders:order-verify"), {"order_id": "nope"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "invalid_input")


class OrderQueryAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.customer = make_user()
        self.other = make_user()
        self.admin = make_user(role=User.ROLE_ADMIN)
        self.seller = make_user(role=User.ROLE_SELLER)
        self.stranger = make_user(role=User.ROLE_SELLER)
        product = make_product(seller=self.seller, price="100.00", stock=10)

        self.mine = make_pending_order(customer=self.customer, lines=[(product, 1)])
        self.theirs = make_pending_order(customer=self.other, lines=[(product, 2)])

    def test_my_orders_lists_only_own(self):
        self.client.force_authenticate(user=self.customer)

        res = self.client.get(reverse("orders:my-orders"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["id"], str(self.mine.id))
        self.assertEqual(res.data["results"][0]["shipping_address"]["country"], "India")

    def test_customer_cannot_see_other_customers_order(self):
        self.client.force_authenticate(user=self.customer)

        res = self.client.get(reverse("orders:order-detail", kwargs={"order_id": self.theirs.id}))

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "not_found")

    def test_seller_sees_orders_holding_their_items(self):
        self.client.force_authenticate(user=self.seller)

        res = self.client.get(reverse("orders:order-detail", kwargs={"order_id": self.theirs.id}))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(res.data["total_amount"]), Decimal("200.00"))

    def test_other_seller_gets_not_found(self):
        self.client.force_authenticate(user=self.stranger)

        res = self.client.get(reverse("orders:order-detail", kwargs={"order_id": self.theirs.id}))

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertNotIn("customer_email", res.data)

        res = self.client.patch(
            reverse("orders:order-status", kwargs={"order_id": self.mine.id}),
            {"status": "cancelled"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.mine.refresh_from_db()
        self.assertEqual(self.mine.status, Order.STATUS_PENDING)

    def test_seller_orders_lists_only_orders_with_their_items(self):
        own_product = make_product(seller=self.stranger, price="20.00", stock=5)
        stranger_order = make_pending_order(customer=self.other, lines=[(own_product, 1)])
        self.theirs.status = Order.STATUS_CANCELLED
        self.theirs.save()

        self.client.force_authenticate(user=self.seller)
        res = self.client.get(reverse("seller:seller-orders"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 2)
        self.assertNotIn(str(stranger_order.id), {row["id"] for row in res.data["results"]})

        res = self.client.get(reverse("seller:seller-orders"), {"status": "pending"})
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["id"], str(self.mine.id))

    def test_seller_orders_forbidden_for_customer(self):
        self.client.force_authenticate(user=self.customer)

        res = self.client.get(reverse("seller:seller-orders"))

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_all_orders_is_admin_only(self):
        self.client.force_authenticate(user=self.customer)
        self.assertEqual(self.client.get(reverse("orders:order-list")).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        res = self.client.get(reverse("orders:order-list"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 2)

    def test_status_update_by_seller(self):
        self.client.force_authenticate(user=self.seller)
        url = reverse("orders:order-status", kwargs={"order_id": self.mine.id})

        res = self.client.patch(url, {"status": "shipped"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "invalid_state")

        res = self.client.patch(url, {"status": "cancelled"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "cancelled")

    def test_status_update_forbidden_for_customer(self):
        self.client.force_authenticate(user=self.customer)
        url = reverse("orders:order-status", kwargs={"order_id": self.mine.id})

        res = self.client.patch(url, {"status": "cancelled"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)


class HealthCheckTests(TestCase):
    def test_health_is_public(self):
        res = APIClient().get(reverse("health-check"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"status": "ok", "db": "ok"})
