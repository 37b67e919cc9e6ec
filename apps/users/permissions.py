"""Role-based permission classes shared across the marketplace apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_admin_user(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


class IsAdmin(permissions.BasePermission):
    """Platform administrators only."""

    message = "Admin access required."

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin_user(request.user)


class IsAffiliate(permissions.BasePermission):
    """Users with the affiliate role."""

    message = "Affiliate access required."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return hasattr(user, "is_affiliate") and user.is_affiliate()


class IsAdminOrAffiliate(permissions.BasePermission):
    message = "Admin or affiliate access required."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if is_admin_user(user):
            return True
        return bool(user and user.is_authenticated and user.is_affiliate())


class IsMerchant(permissions.BasePermission):
    """Users with the merchant role."""

    message = "Merchant access required."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return hasattr(user, "is_merchant") and user.is_merchant()


class IsAdminOrReadOnly(permissions.BasePermission):
    """Anyone can read, only administrators can write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin_user(request.user)
