"""
URL configuration for the payments app.

Registers the ticket checkout, verification and listing endpoints and
exposes a webhook endpoint for Stripe.  Include this module under
``/api/payments/`` in the project-level URL config.
"""
from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import CheckoutView, PublishableKeyView, StripeWebhookView, TicketViewSet, VerifyTicketPaymentView

router = DefaultRouter()
router.register(r"tickets", TicketViewSet, basename="ticket")

urlpatterns = [
    *router.urls,
    path("checkout/", CheckoutView.as_view(), name="ticket-checkout"),
    path("verify/", VerifyTicketPaymentView.as_view(), name="ticket-verify"),
    path("config/", PublishableKeyView.as_view(), name="stripe-config"),
    path("webhook/stripe/", StripeWebhookView.as_view(), name="stripe-webhook"),
]
