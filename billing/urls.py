from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import BillingRecordViewSet, FeeConfigView

router = DefaultRouter()
router.register(r"billing/records", BillingRecordViewSet, basename="billing-record")

urlpatterns = router.urls + [
    path("admin-config/fees/", FeeConfigView.as_view(), name="fee-config"),
]
