# users/permissions.py

from rest_framework.permissions import BasePermission

from users.models import User


# ---------------- BASE ROLE PERMISSION ----------------
class HasRole(BasePermission):
    """
    Base permission to check user role safely.
    """

    allowed_roles = set()

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role in self.allowed_roles)


# ---------------- ROLE PERMISSIONS ----------------
class IsCustomer(HasRole):
    allowed_roles = {User.ROLE_CUSTOMER}


class IsAdmin(HasRole):
    allowed_roles = {User.ROLE_ADMIN}


class IsAdminOrSeller(HasRole):
    """
    Staff allowed to move orders through fulfilment.
    """

    allowed_roles = {User.ROLE_ADMIN, User.ROLE_SELLER}
