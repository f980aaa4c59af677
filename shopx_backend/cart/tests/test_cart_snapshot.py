from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase

from cart.models import Cart, CartItem
from cart.services.cart_snapshot import CartNotFound, read_cart_snapshot
from orders.services.exceptions import InvalidState, NotFound
from products.models import Product

User = get_user_model()


class CartSnapshotTests(TestCase):
    def setUp(self):
        self.customer = User.objects.create_user(email="buyer@example.com", password="pass")
        seller = User.objects.create_user(
            email="seller@example.com", password="pass", role=User.ROLE_SELLER
        )
        self.product = Product.objects.create(
            seller=seller, name="Mug", slug="mug", price=Decimal("120.00"), stock=4
        )

    def test_missing_cart_raises_not_found(self):
        with self.assertRaises(CartNotFound):
            read_cart_snapshot(customer=self.customer)

        self.assertTrue(issubclass(CartNotFound, NotFound))

    def test_empty_cart_raises_invalid_state(self):
        Cart.objects.create(customer=self.customer)

        with self.assertRaisesMessage(InvalidState, "Cart is empty"):
            read_cart_snapshot(customer=self.customer)

    def test_snapshot_resolves_live_products(self):
        cart = Cart.objects.create(customer=self.customer)
        CartItem.objects.create(cart=cart, product=self.product, quantity=2)

        # live state, including a deactivation after the item was added
        Product.objects.filter(pk=self.product.pk).update(is_active=False)

        snapshot = read_cart_snapshot(customer=self.customer)

        self.assertEqual(len(snapshot.lines), 1)
        line = snapshot.lines[0]
        self.assertEqual(line.product_id, self.product.pk)
        self.assertEqual(line.quantity, 2)
        self.assertFalse(line.product.is_active)
        self.assertEqual(snapshot.subtotal, Decimal("240.00"))
