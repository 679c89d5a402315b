"""
ViewSets for the events app.

Anyone can browse published events.  Restaurant owners create events
at their own restaurants; other creators submit events for the
restaurant owner's approval.  Attendees choose dishes through
``menu-selections`` and promoters share affiliate links.
"""
import logging

from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.filters import OrderingFilter
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import SAFE_METHODS, AllowAny, BasePermission, IsAuthenticated
from rest_framework.response import Response

from common.permissions import is_admin
from common.utils import client_ip
from restaurants.permissions import owns_restaurant

from .filters import EventFilter
from .models import AffiliateLink, Event, EventMenuSelection
from .serializers import (
    AffiliateLinkSerializer,
    EventMenuSelectionSerializer,
    EventSerializer,
    MenuSelectionSerializer,
    RejectEventSerializer,
    TrackClickSerializer,
)
from .services import get_or_create_link, link_stats, track_click

logger = logging.getLogger("events")


class IsCreatorOrReadOnly(BasePermission):
    """
    Allow read access to everyone, but only allow the event creator
    (or an admin) to modify or delete an event.
    """

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        return is_admin(request.user) or obj.user_id == request.user.id


class EventViewSet(viewsets.ModelViewSet):
    """
    Full CRUD over events with:
    - Filters (location, date / date_from / date_to, price, search, restaurant)
    - Approval flow (submit-for-approval, approve, reject)
    - publish / unpublish
    - Menu selections and affiliate links for the caller
    """
    parser_classes = (MultiPartParser, FormParser, JSONParser)
    serializer_class = EventSerializer
    permission_classes = [IsCreatorOrReadOnly]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = EventFilter
    ordering_fields = ["date", "price", "created_at", "title"]
    ordering = ["date", "time"]

    def get_queryset(self):
        """
        Visibility:
          - Anonymous users see only published events
          - Authenticated users also see events they created or that are
            hosted at their restaurants
          - Admins see everything
        ``?mine=1`` limits the list to events the caller created.
        """
        user = self.request.user
        qs = Event.objects.select_related("restaurant")

        if not user.is_authenticated:
            qs = qs.filter(published=True)
        elif not is_admin(user):
            qs = qs.filter(
                Q(published=True) | Q(user_id=user.id) | Q(restaurant__user_id=user.id)
            )

        mine = (self.request.query_params.get("mine") or "").lower()
        if mine in {"1", "true", "yes"}:
            if not user.is_authenticated:
                return Event.objects.none()
            qs = qs.filter(user_id=user.id)
        return qs

    def get_permissions(self):
        if self.action in ["list", "retrieve", "track_click"]:
            return [AllowAny()]
        return super().get_permissions()

    def _check_restaurant(self, restaurant):
        if not owns_restaurant(self.request.user, restaurant):
            raise PermissionDenied("You can only create events for restaurants you own.")

    def perform_create(self, serializer):
        self._check_restaurant(serializer.validated_data["restaurant"])
        event = serializer.save(user=self.request.user)
        logger.info("Event %s created by user=%s", event.id, self.request.user.id)

    def perform_update(self, serializer):
        restaurant = serializer.validated_data.get("restaurant")
        if restaurant is not None and restaurant.pk != serializer.instance.restaurant_id:
            self._check_restaurant(restaurant)
        serializer.save()

    # ---------------------- Approval ----------------------
    def _require_creator(self, event):
        if not (is_admin(self.request.user) or event.user_id == self.request.user.id):
            raise PermissionDenied("Only the event creator can do this.")

    def _require_host(self, event):
        if not owns_restaurant(self.request.user, event.restaurant):
            raise PermissionDenied("Only the restaurant owner can approve or reject this event.")

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated], url_path="submit-for-approval")
    def submit_for_approval(self, request, pk=None):
        event = self.get_object()
        self._require_creator(event)
        event.approval_status = Event.APPROVAL_PENDING
        event.submitted_for_approval_at = timezone.now()
        event.rejection_reason = ""
        event.save(update_fields=["approval_status", "submitted_for_approval_at", "rejection_reason", "updated_at"])
        return Response(self.get_serializer(event).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def approve(self, request, pk=None):
        event = self.get_object()
        self._require_host(event)
        event.approval_status = Event.APPROVAL_APPROVED
        event.approval_date = timezone.now()
        event.approved_by = request.user
        event.save(update_fields=["approval_status", "approval_date", "approved_by", "updated_at"])
        logger.info("Event %s approved by user=%s", event.id, request.user.id)
        return Response(self.get_serializer(event).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def reject(self, request, pk=None):
        event = self.get_object()
        self._require_host(event)
        serializer = RejectEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event.approval_status = Event.APPROVAL_REJECTED
        event.rejection_date = timezone.now()
        event.rejected_by = request.user
        event.rejection_reason = serializer.validated_data["reason"]
        event.published = False
        event.save(update_fields=[
            "approval_status", "rejection_date", "rejected_by", "rejection_reason", "published", "updated_at",
        ])
        logger.info("Event %s rejected by user=%s", event.id, request.user.id)
        return Response(self.get_serializer(event).data)

    # ---------------------- Publishing ----------------------
    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def publish(self, request, pk=None):
        event = self.get_object()
        self._require_creator(event)
        if event.approval_status in (Event.APPROVAL_PENDING, Event.APPROVAL_REJECTED):
            raise ValidationError("This event must be approved by the restaurant before it can be published.")
        event.published = True
        event.save(update_fields=["published", "updated_at"])
        return Response(self.get_serializer(event).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def unpublish(self, request, pk=None):
        event = self.get_object()
        self._require_creator(event)
        event.published = False
        event.save(update_fields=["published", "updated_at"])
        return Response(self.get_serializer(event).data)

    # ---------------------- Menu selections ----------------------
    @action(detail=True, methods=["get", "put"], permission_classes=[IsAuthenticated], url_path="menu-selections")
    def menu_selections(self, request, pk=None):
        """GET the caller's dishes for this event; PUT ``{"menu_item_ids": [...]}`` replaces them."""
        event = self.get_object()
        if request.method == "PUT":
            serializer = MenuSelectionSerializer(data=request.data, context={"event": event})
            serializer.is_valid(raise_exception=True)
            ids = serializer.validated_data["menu_item_ids"]
            with transaction.atomic():
                EventMenuSelection.objects.filter(event=event, user=request.user).delete()
                EventMenuSelection.objects.bulk_create(
                    [EventMenuSelection(event=event, user=request.user, menu_item_id=i) for i in ids]
                )

        qs = (
            EventMenuSelection.objects.filter(event=event, user=request.user)
            .select_related("menu_item")
            .prefetch_related("menu_item__ingredients", "menu_item__media")
        )
        return Response(EventMenuSelectionSerializer(qs, many=True).data)

    # ---------------------- Affiliates ----------------------
    @action(detail=True, methods=["get", "post"], permission_classes=[IsAuthenticated], url_path="affiliate-link")
    def affiliate_link(self, request, pk=None):
        """The caller's referral link for this event (created on POST) with its stats."""
        event = self.get_object()
        if request.method == "POST":
            link = get_or_create_link(request.user, event)
        else:
            link = get_object_or_404(AffiliateLink, user=request.user, event=event)
        data = AffiliateLinkSerializer(link).data
        data["stats"] = link_stats(link)
        return Response(data)

    @action(detail=True, methods=["post"], url_path="track-click")
    def track_click(self, request, pk=None):
        event = self.get_object()
        serializer = TrackClickSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        link = track_click(
            serializer.validated_data["code"],
            event,
            referred_user=request.user,
            ip_address=client_ip(request) or "",
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )
        return Response({"tracked": link is not None})


class AffiliateLinkViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """The caller's affiliate links across events, each with its stats."""
    serializer_class = AffiliateLinkSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return AffiliateLink.objects.filter(user=self.request.user).select_related("event")

    def list(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        links = page if page is not None else self.get_queryset()
        data = []
        for link in links:
            row = self.get_serializer(link).data
            row["stats"] = link_stats(link)
            data.append(row)
        if page is not None:
            return self.get_paginated_response(data)
        return Response(data)

    def retrieve(self, request, *args, **kwargs):
        link = self.get_object()
        data = self.get_serializer(link).data
        data["stats"] = link_stats(link)
        return Response(data, status=status.HTTP_200_OK)
