# users/tests/test_users.py

from types import SimpleNamespace

from django.test import TestCase

from users.models import User
from users.permissions import IsAdmin, IsAdminOrSeller, IsCustomer


class UserManagerTests(TestCase):
    def test_create_user_defaults_to_customer(self):
        user = User.objects.create_user(email="  Asha@Example.COM ", password="pass")

        self.assertEqual(user.email, "Asha@example.com")
        self.assertEqual(user.role, User.ROLE_CUSTOMER)
        self.assertTrue(user.check_password("pass"))
        self.assertEqual(user.display_name, "Asha")

    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="pass")

    def test_create_superuser_is_admin(self):
        admin = User.objects.create_superuser(email="root@example.com", password="pass")

        self.assertEqual(admin.role, User.ROLE_ADMIN)
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_superuser)


class RolePermissionTests(TestCase):
    def _request(self, role):
        user = User.objects.create_user(email=f"{role}@example.com", password="pass", role=role)
        return SimpleNamespace(user=user)

    def test_role_gates(self):
        customer = self._request(User.ROLE_CUSTOMER)
        seller = self._request(User.ROLE_SELLER)
        admin = self._request(User.ROLE_ADMIN)

        self.assertTrue(IsCustomer().has_permission(customer, None))
        self.assertFalse(IsCustomer().has_permission(seller, None))

        self.assertTrue(IsAdminOrSeller().has_permission(seller, None))
        self.assertTrue(IsAdminOrSeller().has_permission(admin, None))
        self.assertFalse(IsAdminOrSeller().has_permission(customer, None))

        self.assertTrue(IsAdmin().has_permission(admin, None))
        self.assertFalse(IsAdmin().has_permission(seller, None))
