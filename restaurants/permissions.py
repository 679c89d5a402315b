from rest_framework.permissions import SAFE_METHODS, BasePermission

from common.permissions import is_admin


def owns_restaurant(user, restaurant) -> bool:
    if not user or not user.is_authenticated:
        return False
    return is_admin(user) or restaurant.user_id == user.id


class IsRestaurantOwnerOrReadOnly(BasePermission):
    """
    Writes to a restaurant's menu are limited to its owner.
    The view exposes the parent restaurant as ``view.restaurant``.
    """

    message = "Only the restaurant owner can change its menu."

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return owns_restaurant(request.user, view.restaurant)
