"""Permission classes shared by the API apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_admin_user(user) -> bool:  # type: ignore
    return bool(user and user.is_authenticated and hasattr(user, "is_admin") and user.is_admin())


class IsAdminRole(permissions.BasePermission):
    """Only administrators (role=admin or Django staff) may access."""

    message = "Require Admin Role!"

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin_user(request.user)


class IsSelfOrAdmin(permissions.BasePermission):
    """Object-level permission: the user record itself or an administrator."""

    message = "Not authorized to access this user"

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        return is_admin_user(user) or obj.pk == user.pk
