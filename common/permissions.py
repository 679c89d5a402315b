"""
Shared DRF permission classes.

These stand in for the route guards of the web client: a request is
either anonymous, an authenticated member, an owner of the object it
touches, or an admin (``UserProfile.role == "admin"`` or Django staff).
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS


def is_admin(user) -> bool:
    """True for staff/superusers and users whose profile role is admin."""
    if not user or not user.is_authenticated:
        return False
    if user.is_staff or user.is_superuser:
        return True
    profile = getattr(user, "profile", None)
    return bool(profile and profile.role == "admin")


class IsAdminRole(BasePermission):
    """Back-office endpoints."""

    message = "Admin access required."

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsOwnerOrAdminOrReadOnly(BasePermission):
    """
    Read for everyone (if view allows), write only for owner; admins bypass.
    Assumes the object has a `user` field.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return is_admin(user) or getattr(obj, "user_id", None) == user.id
