# cart/tests/test_cart_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from cart.models import Cart, CartItem
from products.models import Product

User = get_user_model()


class CartAPITests(TestCase):
    """
    Customer cart endpoints.

    GUARANTEES:
    - Cart is lazily created, one per customer
    - Adding checks product availability + stock
    - Totals are derived from live effective prices
    """

    def setUp(self):
        self.client = APIClient()

        self.customer = User.objects.create_user(email="buyer@example.com", password="pass")
        self.seller = User.objects.create_user(
            email="seller@example.com", password="pass", role=User.ROLE_SELLER
        )
        self.client.force_authenticate(user=self.customer)

        self.shirt = Product.objects.create(
            seller=self.seller,
            name="Shirt",
            slug="shirt",
            price=Decimal("300.00"),
            discounted_price=Decimal("250.00"),
            stock=3,
        )

    def _add(self, product, quantity):
        return self.client.post(
            reverse("cart:add-cart-item"),
            {"product_id": str(product.id), "quantity": quantity},
            format="json",
        )

    def test_get_creates_empty_cart(self):
        res = self.client.get(reverse("cart:cart"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["items"], [])
        self.assertEqual(Cart.objects.filter(customer=self.customer).count(), 1)

    def test_add_item_and_totals_use_effective_price(self):
        res = self._add(self.shirt, 2)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["item_count"], 2)
        self.assertEqual(Decimal(res.data["subtotal_amount"]), Decimal("500.00"))

    def test_adding_same_product_increments_quantity(self):
        self._add(self.shirt, 1)
        self._add(self.shirt, 2)

        item = CartItem.objects.get(cart__customer=self.customer, product=self.shirt)
        self.assertEqual(item.quantity, 3)

    def test_add_beyond_stock_is_rejected(self):
        self._add(self.shirt, 2)
        res = self._add(self.shirt, 2)

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "insufficient_stock")

    def test_add_inactive_product_is_unavailable(self):
        self.shirt.is_active = False
        self.shirt.save()

        res = self._add(self.shirt, 1)

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "unavailable")

    def test_add_invalid_quantity_is_invalid_input(self):
        res = self._add(self.shirt, 0)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "invalid_input")
        self.assertTrue(res.data["error"]["message"].startswith("quantity: "))

    def test_update_and_remove_item(self):
        self._add(self.shirt, 1)
        url = reverse("cart:cart-item", kwargs={"product_id": self.shirt.id})

        res = self.client.patch(url, {"quantity": 3}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["item_count"], 3)

        res = self.client.delete(url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["items"], [])

    def test_update_missing_item_is_not_found(self):
        url = reverse("cart:cart-item", kwargs={"product_id": self.shirt.id})

        res = self.client.patch(url, {"quantity": 1}, format="json")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "not_found")

    def test_clear_cart_keeps_cart_row(self):
        self._add(self.shirt, 1)

        res = self.client.post(reverse("cart:clear-cart"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertFalse(CartItem.objects.filter(cart__customer=self.customer).exists())
        self.assertTrue(Cart.objects.filter(customer=self.customer).exists())

    def test_requires_authentication(self):
        anon = APIClient()
        res = anon.get(reverse("cart:cart"))
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
