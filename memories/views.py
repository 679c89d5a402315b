"""
Memory endpoints.

Members keep memories of their meals.  The owner sees all of their own
memories; everyone else sees public ones in listings and may also open
an unlisted memory by id.  Photos, notes, dishes and attendees are
managed through actions on the memory.
"""
import logging

from django.contrib.auth import get_user_model
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from common.permissions import IsOwnerOrAdminOrReadOnly

from .models import Memory, MemoryAttendee
from .serializers import (
    MemoryAttendeeSerializer,
    MemoryContentSerializer,
    MemoryDishSerializer,
    MemorySerializer,
)

User = get_user_model()
logger = logging.getLogger(__name__)


class MemoryViewSet(viewsets.ModelViewSet):
    """``?mine=1`` limits the list to the caller's memories."""

    parser_classes = (MultiPartParser, FormParser, JSONParser)
    serializer_class = MemorySerializer
    permission_classes = [IsAuthenticatedOrReadOnly, IsOwnerOrAdminOrReadOnly]

    def get_queryset(self):
        user = self.request.user
        qs = Memory.objects.select_related("user").prefetch_related("contents", "dishes", "attendees__user")
        mine = Q(user=user) if user.is_authenticated else Q(pk__in=[])

        if self.action == "list":
            if self.request.query_params.get("mine") in ("1", "true", "True"):
                return qs.filter(mine)
            return qs.filter(mine | Q(privacy=Memory.PRIVACY_PUBLIC))
        return qs.filter(mine | Q(privacy__in=[Memory.PRIVACY_PUBLIC, Memory.PRIVACY_UNLISTED]))

    def perform_create(self, serializer):
        memory = serializer.save(user=self.request.user)
        logger.info("Memory %s created by user %s", memory.id, self.request.user.id)

    @action(detail=True, methods=["post"])
    def content(self, request, pk=None):
        memory = self.get_object()
        serializer = MemoryContentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(memory=memory)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"content/(?P<content_id>\d+)")
    def remove_content(self, request, pk=None, content_id=None):
        memory = self.get_object()
        item = get_object_or_404(memory.contents, pk=content_id)
        if item.file:
            item.file.delete(save=False)
        item.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def dishes(self, request, pk=None):
        memory = self.get_object()
        serializer = MemoryDishSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(memory=memory, user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"dishes/(?P<dish_id>\d+)")
    def remove_dish(self, request, pk=None, dish_id=None):
        memory = self.get_object()
        get_object_or_404(memory.dishes, pk=dish_id).delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def attendees(self, request, pk=None):
        memory = self.get_object()
        serializer = MemoryAttendeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attendee_user = get_object_or_404(User, pk=serializer.validated_data["user_id"])
        attendee, created = MemoryAttendee.objects.update_or_create(
            memory=memory,
            user=attendee_user,
            defaults={"is_tagged": serializer.validated_data.get("is_tagged", False)},
        )
        return Response(
            MemoryAttendeeSerializer(attendee).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["delete"], url_path=r"attendees/(?P<user_id>\d+)")
    def remove_attendee(self, request, pk=None, user_id=None):
        memory = self.get_object()
        get_object_or_404(memory.attendees, user_id=user_id).delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
