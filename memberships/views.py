"""
Views for the membership signup wizard.

The wizard is open to anonymous visitors: step one validates the
signup or membership form, step two opens a Stripe Checkout Session,
and step three verifies the session when the visitor returns.  Signed
in members can read their own membership and payment history.
"""
import logging

from django.conf import settings
from rest_framework import generics, permissions, status, views, viewsets
from rest_framework.response import Response

from common.permissions import is_admin
from payments import stripe_client
from payments.serializers import VerifySessionSerializer
from users.services import find_user_by_email

from . import services
from .models import Membership, MembershipPayment, Product
from .serializers import (
    MembershipCheckoutSerializer,
    MembershipFormSerializer,
    MembershipPaymentSerializer,
    MembershipSerializer,
    ProductSerializer,
    SignupSerializer,
    StatusCheckSerializer,
)

logger = logging.getLogger("memberships")


class ProductListView(generics.ListAPIView):
    permission_classes = [permissions.AllowAny]
    serializer_class = ProductSerializer
    pagination_class = None
    queryset = Product.objects.filter(active=True)


class SignupStepView(views.APIView):
    """Validate the account fields of the signup step."""

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]
        return Response({
            "valid": True,
            "email": email,
            "user_exists": find_user_by_email(email) is not None,
        })


class MembershipFormStepView(views.APIView):
    """Validate the membership form and report what the member would pay."""

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = MembershipFormSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        return Response({"valid": True, **services.status_for_email(data["email"])})


class MembershipCheckoutView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = MembershipCheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user = request.user if request.user.is_authenticated else None
        session, amount_cents = services.start_checkout(
            email=data["email"],
            name=data["name"],
            phone=data.get("phone", ""),
            address=data["address"],
            password=data.get("password", ""),
            user=user,
            product=data.get("product"),
            restaurant=data.get("restaurant"),
        )
        return Response(
            {
                "url": session["url"],
                "session_id": session["id"],
                "amount_cents": amount_cents,
                "prorated": amount_cents != settings.MEMBERSHIP_PRICE_CENTS,
            },
            status=status.HTTP_201_CREATED,
        )


class VerifyMembershipPaymentView(views.APIView):
    """Called once when the visitor returns from Stripe with ``session_id``."""

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = VerifySessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session_id = serializer.validated_data["session_id"]
        logger.info("Verifying membership payment for session %s", session_id)

        session = stripe_client.retrieve_checkout_session(session_id)
        user = request.user if request.user.is_authenticated else None
        result = services.activate_from_checkout_session(session, user=user)
        member = result["user"]
        return Response({
            "success": True,
            "message": "Payment verified successfully",
            "already_processed": result["already_processed"],
            "user_created": result["user_created"],
            "needs_password": member.profile.needs_password,
            "email": member.email,
            "membership": MembershipSerializer(result["membership"]).data,
        })


class MembershipStatusView(views.APIView):
    """POST ``{"email"}``; the wizard uses it to detect existing members."""

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = StatusCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(services.status_for_email(serializer.validated_data["email"]))


class MyMembershipView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        membership = (
            Membership.objects.filter(user=request.user)
            .select_related("product")
            .order_by("-created_at")
            .first()
        )
        return Response({
            "membership": MembershipSerializer(membership).data if membership else None,
            "is_active": bool(membership and membership.is_active),
        })


class MembershipPaymentViewSet(viewsets.ReadOnlyModelViewSet):
    """Membership orders: the caller's own, or everyone's for admins."""

    serializer_class = MembershipPaymentSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = MembershipPayment.objects.select_related("membership__user")
        if is_admin(self.request.user):
            return qs
        return qs.filter(membership__user=self.request.user)
