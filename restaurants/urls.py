from django.urls import include, path
from rest_framework.routers import DefaultRouter, SimpleRouter

from .views import MenuItemViewSet, RestaurantViewSet

router = DefaultRouter()
router.register(r"restaurants", RestaurantViewSet, basename="restaurant")

menu_router = SimpleRouter()
menu_router.register(r"menu-items", MenuItemViewSet, basename="menu-item")

urlpatterns = router.urls + [
    path("restaurants/<int:restaurant_pk>/", include(menu_router.urls)),
]
