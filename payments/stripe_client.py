"""
Thin wrapper around the Stripe SDK.

Views call these helpers instead of the SDK directly so that the API
key is set in one place and Stripe failures turn into DRF errors with
the provider's message.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal

import stripe
from django.conf import settings
from rest_framework.exceptions import APIException

logger = logging.getLogger("payments")


class PaymentConfigurationError(APIException):
    status_code = 500
    default_detail = "Server configuration error"
    default_code = "payment_configuration"


class PaymentProviderError(APIException):
    status_code = 502
    default_detail = "Payment provider error"
    default_code = "payment_provider"


def configure():
    key = settings.STRIPE_SECRET_KEY
    if not key:
        logger.error("STRIPE_SECRET_KEY is not configured")
        raise PaymentConfigurationError("Server configuration error: Missing Stripe key")
    stripe.api_key = key
    return stripe


def _call(fn, *args, **kwargs):
    configure()
    try:
        return fn(*args, **kwargs)
    except stripe.StripeError as e:
        message = getattr(e, "user_message", None) or str(e)
        logger.warning("Stripe call %s failed: %s", getattr(fn, "__qualname__", fn), message)
        raise PaymentProviderError(message)


def create_checkout_session(**params):
    return _call(stripe.checkout.Session.create, **params)


def retrieve_checkout_session(session_id: str, **params):
    return _call(stripe.checkout.Session.retrieve, session_id, **params)


def retrieve_subscription(subscription_id: str):
    return _call(stripe.Subscription.retrieve, subscription_id)


def retrieve_payment_intent(intent_id: str):
    return _call(stripe.PaymentIntent.retrieve, intent_id)


def construct_webhook_event(payload: bytes, sig_header: str):
    """Verify the signature; raises ``ValueError`` or ``stripe.SignatureVerificationError``."""
    secret = settings.STRIPE_WEBHOOK_SECRET
    if not secret:
        raise PaymentConfigurationError("Server configuration error: Missing webhook secret")
    stripe.api_key = settings.STRIPE_SECRET_KEY
    return stripe.Webhook.construct_event(payload=payload, sig_header=sig_header, secret=secret)


def receipt_url_for_session(session) -> str:
    """
    Best-effort receipt link for a checkout session: the charge receipt
    for one-time payments, the hosted invoice for subscriptions.
    """
    try:
        configure()
        intent_id = session.get("payment_intent")
        subscription_id = session.get("subscription")
        if intent_id:
            intent = stripe.PaymentIntent.retrieve(intent_id)
            charge_id = intent.get("latest_charge")
            if charge_id:
                return stripe.Charge.retrieve(charge_id).get("receipt_url") or ""
        elif subscription_id:
            invoices = stripe.Invoice.list(subscription=subscription_id, limit=1)
            if invoices.data:
                return invoices.data[0].get("hosted_invoice_url") or ""
    except (stripe.StripeError, PaymentConfigurationError) as e:
        logger.warning("Could not fetch receipt for session %s: %s", session.get("id"), e)
    return ""


def to_cents(amount) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def stripe_mode() -> str:
    key = settings.STRIPE_PUBLISHABLE_KEY or settings.STRIPE_SECRET_KEY or ""
    return "live" if "_live_" in key else "test"


def session_ids_for_payment_intent(intent_id: str) -> list:
    sessions = _call(stripe.checkout.Session.list, payment_intent=intent_id, limit=10)
    return [s["id"] for s in sessions.data]
