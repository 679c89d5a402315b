"""
URL configuration for the EatMeetClub backend.

All API endpoints live under ``/api/``; each app contributes its own
router.  Authentication endpoints are nested under ``/api/auth/`` and
payment endpoints under ``/api/payments/``.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView
from rest_framework.routers import DefaultRouter

from eatmeetclub.views import health, index
from users.views import AdminUserViewSet

router = DefaultRouter()
router.register(r"admin/users", AdminUserViewSet, basename="admin-user")

urlpatterns = [
    path("", index, name="index"),
    path("health/", health, name="health"),
    path("admin/", admin.site.urls),

    path("api/", RedirectView.as_view(pattern_name="swagger-ui", permanent=False)),

    # Swagger/Redoc
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),

    # Auth endpoints
    path("api/auth/", include("users.urls")),
    path("api/payments/", include("payments.urls")),

    path("api/", include(router.urls)),
    path("api/", include("restaurants.urls")),
    path("api/", include("events.urls")),
    path("api/", include("memberships.urls")),
    path("api/", include("billing.urls")),
    path("api/", include("featureflags.urls")),
    path("api/", include("contracts.urls")),
    path("api/", include("memories.urls")),
    path("api/", include("notifications.urls")),
]

if settings.DEBUG:
    # Only serve MEDIA_URL via Django if it's a local path (avoid trying to serve S3)
    if getattr(settings, "MEDIA_URL", "").startswith("/"):
        urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
