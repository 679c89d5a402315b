from rest_framework.routers import DefaultRouter

from .views import AffiliateLinkViewSet, EventViewSet

router = DefaultRouter()
router.register(r"events", EventViewSet, basename="event")
router.register(r"affiliate-links", AffiliateLinkViewSet, basename="affiliate-link")

urlpatterns = router.urls
