"""Role permissions driven by the closed `UserRole` enumeration."""

from common.choices import UserRole
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Allow only authenticated callers holding the `admin` role."""

    message = "Admin access required"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "role", None) == UserRole.ADMIN)


class IsCustomer(BasePermission):
    """Allow authenticated callers with any known role (`user` or `admin`)."""

    message = "User access required"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "role", None) in UserRole.values)
