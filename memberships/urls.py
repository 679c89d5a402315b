from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import (
    MembershipCheckoutView,
    MembershipFormStepView,
    MembershipPaymentViewSet,
    MembershipStatusView,
    MyMembershipView,
    ProductListView,
    SignupStepView,
    VerifyMembershipPaymentView,
)

router = DefaultRouter()
router.register(r"memberships/payments", MembershipPaymentViewSet, basename="membership-payment")

urlpatterns = [
    path("memberships/products/", ProductListView.as_view(), name="membership-products"),
    path("memberships/signup/", SignupStepView.as_view(), name="membership-signup"),
    path("memberships/form/", MembershipFormStepView.as_view(), name="membership-form"),
    path("memberships/checkout/", MembershipCheckoutView.as_view(), name="membership-checkout"),
    path("memberships/verify/", VerifyMembershipPaymentView.as_view(), name="membership-verify"),
    path("memberships/status/", MembershipStatusView.as_view(), name="membership-status"),
    path("memberships/me/", MyMembershipView.as_view(), name="membership-me"),
    *router.urls,
]
