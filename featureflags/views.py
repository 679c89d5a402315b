"""
Feature flag endpoints.

Admins manage flags, their per-environment values and per-user
targeting.  Anyone may read the flags resolved for themselves.
"""
import logging

from django.contrib.auth import get_user_model
from django.db.models import Prefetch
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, views, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from common.permissions import IsAdminRole

from . import services
from .models import FeatureFlag, UserFeatureTargeting
from .serializers import (
    FeatureFlagSerializer,
    FeatureFlagValueSerializer,
    TargetingSerializer,
    ToggleValueSerializer,
    UserFeatureTargetingSerializer,
    UserLookupSerializer,
)

User = get_user_model()
logger = logging.getLogger(__name__)


class FeatureFlagViewSet(viewsets.ModelViewSet):
    serializer_class = FeatureFlagSerializer
    permission_classes = [IsAdminRole]
    pagination_class = None

    def get_queryset(self):
        return FeatureFlag.objects.prefetch_related(
            "values",
            Prefetch("targets", queryset=UserFeatureTargeting.objects.select_related("user")),
        )

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = services.create_flag(
            data["feature_key"],
            data["display_name"],
            data.get("description", ""),
        )

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        flag = self.get_object()
        serializer = ToggleValueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        value = services.set_value(flag, **serializer.validated_data)
        return Response(FeatureFlagValueSerializer(value).data)

    @action(detail=True, methods=["post"])
    def targets(self, request, pk=None):
        flag = self.get_object()
        serializer = TargetingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = get_object_or_404(User, pk=serializer.validated_data["user_id"])
        target = services.set_targeting(flag, user, serializer.validated_data["is_enabled"])
        return Response(UserFeatureTargetingSerializer(target).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"targets/(?P<user_id>\d+)")
    def remove_target(self, request, pk=None, user_id=None):
        flag = self.get_object()
        if not services.remove_targeting(flag, int(user_id)):
            return Response({"detail": "Targeting not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path="user-search")
    def user_search(self, request):
        users = services.search_users(request.query_params.get("q", ""))
        return Response(UserLookupSerializer(users, many=True).data)


class ResolvedFlagsView(views.APIView):
    """The caller's resolved flag map for the current environment."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):
        flag_set = services.flags_for_request(request)
        return Response({
            "environment": flag_set.environment,
            "flags": flag_set.as_dict(),
            "fallback": flag_set.fallback,
        })
