from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import FeatureFlagViewSet, ResolvedFlagsView

router = DefaultRouter()
router.register(r"admin/feature-flags", FeatureFlagViewSet, basename="feature-flag")

urlpatterns = [
    path("feature-flags/", ResolvedFlagsView.as_view(), name="feature-flags-resolved"),
    *router.urls,
]
