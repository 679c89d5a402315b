"""
Views for the payments app.

This module exposes endpoints for buying event tickets through Stripe
Checkout, verifying the payment when the buyer returns, listing the
caller's tickets and handling Stripe webhook callbacks.  All endpoints
require authentication except the webhook, which relies solely on
signature verification, and the publishable key lookup.
"""
from __future__ import annotations

import logging

import stripe
from django.conf import settings
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import permissions, status, views, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.response import Response

from billing.fees import get_fee_config
from common.utils import client_ip
from memberships.tasks import activate_membership_from_session

from . import stripe_client
from .models import Ticket
from .serializers import CheckoutRequestSerializer, TicketSerializer, VerifySessionSerializer
from .services import complete_ticket, fail_tickets, start_checkout
from .tasks import process_ticket_payment

logger = logging.getLogger("payments")


class CheckoutView(views.APIView):
    """Open a Stripe Checkout Session for ``quantity`` tickets to an event."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        logger.info("Checkout requested by user=%s event=%s qty=%s", request.user.id, data["event"].id, data["quantity"])
        ticket, session = start_checkout(
            request.user,
            data["event"],
            data["quantity"],
            affiliate_code=data.get("ref", ""),
            ip_address=client_ip(request) or "",
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )
        return Response(
            {
                "url": session["url"],
                "session_id": session["id"],
                "ticket_id": ticket.id,
                "subtotal": str(ticket.subtotal),
                "service_fee": str(ticket.service_fee),
                "total_amount": str(ticket.total_amount),
            },
            status=status.HTTP_201_CREATED,
        )


class VerifyTicketPaymentView(views.APIView):
    """Called when the buyer lands on the success page with ``session_id``."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = VerifySessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session_id = serializer.validated_data["session_id"]
        logger.info("Verifying payment for session %s and user %s", session_id, request.user.id)

        session = stripe_client.retrieve_checkout_session(session_id)
        if session.get("payment_status") != "paid":
            raise ValidationError(f"Payment not completed. Status: {session.get('payment_status')}")

        metadata = session.get("metadata") or {}
        if str(metadata.get("user_id")) != str(request.user.id):
            raise PermissionDenied("User mismatch")

        ticket = Ticket.objects.filter(payment_id=session_id, user=request.user).first()
        if ticket is None:
            raise NotFound("Ticket not found")

        if ticket.payment_status == Ticket.STATUS_COMPLETED:
            return Response({
                "success": True,
                "ticket": TicketSerializer(ticket).data,
                "status": "already_processed",
                "message": "Ticket payment was already processed",
            })

        receipt_url = stripe_client.receipt_url_for_session(session)
        processed = complete_ticket(ticket.id, receipt_url=receipt_url)
        ticket.refresh_from_db()
        return Response({
            "success": True,
            "ticket": TicketSerializer(ticket).data,
            "status": "completed" if processed else "already_processed",
        })


class TicketViewSet(viewsets.ReadOnlyModelViewSet):
    """The caller's tickets, newest first, with event details."""

    serializer_class = TicketSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = Ticket.objects.filter(user=self.request.user).select_related("event__restaurant")
        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(payment_status=status_param)
        return qs

    @action(detail=True, methods=["get"])
    def receipt(self, request, pk=None):
        ticket = self.get_object()
        session = stripe_client.retrieve_checkout_session(ticket.payment_id)
        receipt_url = stripe_client.receipt_url_for_session(session)
        return Response({"receipt_url": receipt_url or None, "success": bool(receipt_url)})


class PublishableKeyView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        key = settings.STRIPE_PUBLISHABLE_KEY
        if not key:
            logger.error("STRIPE_PUBLISHABLE_KEY is not configured")
            return Response(
                {"error": "Failed to retrieve Stripe publishable key", "is_test_mode": True},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        config = get_fee_config()
        mode = stripe_client.stripe_mode()
        return Response({
            "key": key,
            "mode": mode,
            "is_test_mode": mode == "test",
            "service_fee_type": config["ticket_commission_type"],
            "service_fee_value": str(config["ticket_commission_value"]),
        })


@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(views.APIView):
    """Handle incoming Stripe webhook events."""

    permission_classes = []  # no authentication
    authentication_classes = []

    def post(self, request):
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE", "")
        try:
            event = stripe_client.construct_webhook_event(payload, sig_header)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning("Rejected Stripe webhook: %s", e)
            return JsonResponse({"error": "Webhook handler failed"}, status=400)

        event_type = event["type"]
        data_obj = event["data"]["object"]
        logger.info("Stripe webhook %s received", event_type)

        if event_type == "checkout.session.completed":
            self._session_completed(data_obj)
        elif event_type in ("checkout.session.expired", "checkout.session.async_payment_failed"):
            fail_tickets([data_obj["id"]])
        elif event_type == "payment_intent.payment_failed":
            session_ids = stripe_client.session_ids_for_payment_intent(data_obj["id"])
            count = fail_tickets(session_ids)
            logger.info("Marked %s ticket(s) failed for payment intent %s", count, data_obj["id"])
        return JsonResponse({"received": True})

    def _session_completed(self, session):
        if Ticket.objects.filter(payment_id=session["id"]).exists():
            process_ticket_payment.delay(session["id"])
            return
        metadata = session.get("metadata") or {}
        if session.get("mode") == "subscription" or metadata.get("kind") == "membership":
            activate_membership_from_session.delay(session["id"])
            return
        logger.info("No ticket or membership matches session %s", session["id"])
