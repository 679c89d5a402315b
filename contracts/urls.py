from rest_framework.routers import DefaultRouter

from .views import ContractTemplateViewSet

router = DefaultRouter()
router.register(r"admin/contract-templates", ContractTemplateViewSet, basename="contract-template")

urlpatterns = router.urls
