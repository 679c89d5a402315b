"""
Contract template endpoints.

Templates are managed by admins.  Restaurant owners read the active
template of a type, rendered with their restaurant's details, before
signing it.
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from common.permissions import IsAdminRole
from restaurants.models import Restaurant
from restaurants.permissions import owns_restaurant

from . import services
from .models import ContractTemplate
from .serializers import ContractTemplateSerializer, RenderSerializer

logger = logging.getLogger(__name__)


class ContractTemplateViewSet(viewsets.ModelViewSet):
    """``?type=`` filters by template type, ``?active=1`` to active ones."""

    serializer_class = ContractTemplateSerializer
    permission_classes = [IsAdminRole]

    def get_permissions(self):
        if self.action == "active":
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        qs = ContractTemplate.objects.all()
        params = self.request.query_params
        template_type = params.get("type")
        if template_type:
            qs = qs.filter(type=template_type)
        if params.get("active") in ("1", "true", "True"):
            qs = qs.filter(is_active=True)
        return qs

    def perform_create(self, serializer):
        data = serializer.validated_data
        storage_path = data.get("storage_path") or services.default_storage_path(data["type"])
        template = serializer.save(
            created_by=self.request.user,
            updated_by=self.request.user,
            storage_path=storage_path,
            variables=data.get("variables") or [],
        )
        logger.info("Contract template %s (%s) created by %s", template.id, template.type, self.request.user.id)

    def perform_update(self, serializer):
        serializer.save(updated_by=self.request.user)

    def _set_active(self, is_active):
        template = self.get_object()
        template.is_active = is_active
        template.updated_by = self.request.user
        template.save(update_fields=["is_active", "updated_by", "updated_at"])
        return Response(self.get_serializer(template).data)

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):
        return self._set_active(True)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        return self._set_active(False)

    @action(detail=False, methods=["get"], url_path="available-fields")
    def available_fields(self, request):
        return Response(services.DEFAULT_AVAILABLE_FIELDS)

    @action(detail=True, methods=["post"], url_path="render")
    def render_preview(self, request, pk=None):
        """Preview with ``values`` and, optionally, a restaurant's details."""
        template = self.get_object()
        serializer = RenderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        values = {}
        restaurant_id = serializer.validated_data.get("restaurant_id")
        if restaurant_id:
            values.update(services.restaurant_values(get_object_or_404(Restaurant, pk=restaurant_id)))
        values.update(serializer.validated_data["values"])
        content = services.render_content(template.content, values)
        return Response({
            "id": template.id,
            "content": content,
            "missing": services.placeholders(content),
        })

    @action(detail=False, methods=["get"])
    def active(self, request):
        """``?type=restaurant&restaurant_id=``: the newest active template, rendered."""
        template_type = request.query_params.get("type", ContractTemplate.TYPE_RESTAURANT)
        template = ContractTemplate.objects.filter(type=template_type, is_active=True).first()
        if template is None:
            raise NotFound("No active contract template")

        content = template.content
        restaurant_id = request.query_params.get("restaurant_id")
        if restaurant_id:
            restaurant = get_object_or_404(Restaurant, pk=restaurant_id)
            if not owns_restaurant(request.user, restaurant):
                raise PermissionDenied("You do not own this restaurant.")
            content = services.render_content(content, services.restaurant_values(restaurant, request.user))
        return Response(
            {"id": template.id, "name": template.name, "version": template.version, "content": content},
            status=status.HTTP_200_OK,
        )
