"""
ViewSets for the restaurants app.

Anyone may browse restaurants and their menus.  Owners manage their
own listing and menu, submit it for verification and sign the
platform contract; admins verify or reject submissions.
"""
import logging

from django.db.models import Prefetch
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from common.permissions import IsAdminRole, IsOwnerOrAdminOrReadOnly
from common.utils import client_ip

from .models import MenuItem, MenuItemIngredient, MenuItemMedia, Restaurant, RestaurantContract
from .permissions import IsRestaurantOwnerOrReadOnly, owns_restaurant
from .serializers import (
    MenuItemMediaSerializer,
    MenuItemSerializer,
    RestaurantContractSerializer,
    RestaurantSerializer,
    VerificationDecisionSerializer,
    VerificationSubmitSerializer,
)

logger = logging.getLogger(__name__)


class RestaurantViewSet(viewsets.ModelViewSet):
    """
    CRUD over restaurants.

    ``?mine=1`` limits the list to the caller's restaurants;
    ``?verification_status=`` and ``?city=`` narrow it further.
    """
    parser_classes = (MultiPartParser, FormParser, JSONParser)
    serializer_class = RestaurantSerializer
    permission_classes = [IsOwnerOrAdminOrReadOnly]
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["name", "cuisine_type", "city"]
    ordering_fields = ["name", "created_at", "city"]

    def get_queryset(self):
        qs = Restaurant.objects.all()
        params = self.request.query_params
        if (params.get("mine") or "").lower() in {"1", "true", "yes"}:
            if not self.request.user.is_authenticated:
                return Restaurant.objects.none()
            qs = qs.filter(user_id=self.request.user.id)
        status_param = params.get("verification_status")
        if status_param:
            qs = qs.filter(verification_status=status_param)
        city = (params.get("city") or "").strip()
        if city:
            qs = qs.filter(city__icontains=city)
        return qs

    def get_permissions(self):
        if self.action in ["list", "retrieve"]:
            return [AllowAny()]
        if self.action == "create":
            return [IsAuthenticated()]
        return super().get_permissions()

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)

    def _owned(self):
        restaurant = self.get_object()
        if not owns_restaurant(self.request.user, restaurant):
            raise PermissionDenied("You do not own this restaurant.")
        return restaurant

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated], url_path="verification")
    def submit_verification(self, request, pk=None):
        restaurant = self._owned()
        if restaurant.is_verified:
            raise ValidationError("This restaurant is already verified.")
        serializer = VerificationSubmitSerializer(restaurant, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(verification_status=Restaurant.STATUS_PENDING)
        logger.info("Restaurant %s submitted for verification by user=%s", restaurant.id, request.user.id)
        return Response(self.get_serializer(restaurant).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAdminRole])
    def verify(self, request, pk=None):
        restaurant = self.get_object()
        restaurant.verification_status = Restaurant.STATUS_VERIFIED
        restaurant.verified_at = timezone.now()
        restaurant.verified_by = request.user
        restaurant.save(update_fields=["verification_status", "verified_at", "verified_by", "updated_at"])
        logger.info("Restaurant %s verified by admin=%s", restaurant.id, request.user.id)
        return Response(self.get_serializer(restaurant).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAdminRole])
    def reject(self, request, pk=None):
        restaurant = self.get_object()
        serializer = VerificationDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        restaurant.verification_status = Restaurant.STATUS_REJECTED
        restaurant.verified_at = None
        restaurant.verified_by = None
        restaurant.save(update_fields=["verification_status", "verified_at", "verified_by", "updated_at"])
        logger.info(
            "Restaurant %s rejected by admin=%s: %s",
            restaurant.id, request.user.id, serializer.validated_data.get("reason", ""),
        )
        return Response(self.get_serializer(restaurant).data)

    @action(detail=True, methods=["get", "post"], permission_classes=[IsAuthenticated])
    def contracts(self, request, pk=None):
        """GET lists signatures; POST signs the current terms."""
        restaurant = self._owned()
        if request.method == "GET":
            qs = restaurant.contracts.all()
            return Response(RestaurantContractSerializer(qs, many=True).data)

        serializer = RestaurantContractSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contract = serializer.save(
            restaurant=restaurant,
            signed_by=request.user,
            ip_address=client_ip(request),
        )
        if not restaurant.has_signed_contract:
            restaurant.has_signed_contract = True
            restaurant.save(update_fields=["has_signed_contract", "updated_at"])
        return Response(RestaurantContractSerializer(contract).data, status=status.HTTP_201_CREATED)


class MenuItemViewSet(viewsets.ModelViewSet):
    """
    Menu of one restaurant: ``/api/restaurants/<restaurant_pk>/menu-items/``.

    Media is attached with ``POST .../<pk>/media/`` and removed with
    ``DELETE .../<pk>/media/<media_id>/``.
    """
    parser_classes = (MultiPartParser, FormParser, JSONParser)
    serializer_class = MenuItemSerializer
    permission_classes = [IsRestaurantOwnerOrReadOnly]
    pagination_class = None

    def initial(self, request, *args, **kwargs):
        self.restaurant = get_object_or_404(Restaurant, pk=kwargs["restaurant_pk"])
        super().initial(request, *args, **kwargs)

    def get_queryset(self):
        return (
            MenuItem.objects.filter(restaurant_id=self.kwargs["restaurant_pk"])
            .prefetch_related(
                Prefetch("ingredients", queryset=MenuItemIngredient.objects.order_by("id")),
                "media",
            )
        )

    def perform_create(self, serializer):
        serializer.save(restaurant=self.restaurant)

    @action(detail=True, methods=["post"], url_path="media")
    def add_media(self, request, restaurant_pk=None, pk=None):
        item = self.get_object()
        serializer = MenuItemMediaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(menu_item=item)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"media/(?P<media_id>\d+)")
    def remove_media(self, request, restaurant_pk=None, pk=None, media_id=None):
        item = self.get_object()
        media = get_object_or_404(MenuItemMedia, pk=media_id, menu_item=item)
        if media.file:
            media.file.delete(save=False)
        media.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
