"""
Membership pricing, checkout and activation.

The signup wizard posts its form values to ``start_checkout``, which
opens a Stripe Checkout Session in subscription mode and stashes the
values in the cache under the session id.  When the member returns (or
Stripe calls the webhook) ``activate_from_checkout_session`` verifies
the payment, resolves or creates the account and extends the
membership.  Activation is idempotent on the session id.
"""
import logging
import math
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from billing.models import BillingRecord
from billing.services import record_payment
from payments import stripe_client
from restaurants.models import Restaurant
from users.services import find_user_by_email, get_or_create_member, password_setup_link

from .models import Membership, MembershipPayment, Product

logger = logging.getLogger("memberships")

STASH_PREFIX = "memberships:signup:"
# Renewing is only offered once fewer than this many days are left.
RENEWAL_WINDOW_DAYS = 15
MIN_PRORATED_AMOUNT = Decimal("5")


def full_price() -> Decimal:
    return Decimal(settings.MEMBERSHIP_PRICE_CENTS) / 100


def current_membership(user, now=None):
    """The user's active membership that has not run out yet, if any."""
    if user is None:
        return None
    now = now or timezone.now()
    return (
        Membership.objects.filter(user=user, status=Membership.STATUS_ACTIVE)
        .filter(Q(renewal_at__gt=now) | Q(renewal_at__isnull=True))
        .order_by("-started_at")
        .first()
    )


def prorated_price_cents(membership, now=None) -> int:
    """
    Price in cents for a checkout by someone holding ``membership``.

    Raises ``ValidationError`` while more than half of the current period
    remains.
    """
    full = settings.MEMBERSHIP_PRICE_CENTS
    if membership is None or membership.renewal_at is None:
        return full
    now = now or timezone.now()
    elapsed_days = (now - membership.started_at).days
    remaining = settings.MEMBERSHIP_PERIOD_DAYS - elapsed_days
    if remaining <= 0:
        return full
    if remaining < RENEWAL_WINDOW_DAYS:
        return full // 2
    raise ValidationError(f"Active membership exists with >{RENEWAL_WINDOW_DAYS} days remaining")


def status_for_email(email: str, now=None) -> dict:
    """Membership summary shown by the signup wizard before payment."""
    now = now or timezone.now()
    user = find_user_by_email(email)
    membership = None
    if user is not None:
        membership = Membership.objects.filter(user=user).order_by("-created_at").first()

    if membership is None:
        return {
            "user_exists": user is not None,
            "active": False,
            "remaining_days": 0,
            "prorated_amount": full_price(),
            "has_active_membership": False,
        }

    renewal_at = membership.renewal_at
    active = membership.status == Membership.STATUS_ACTIVE and renewal_at is not None and renewal_at > now
    remaining = 0
    if renewal_at is not None:
        remaining = max(0, math.ceil((renewal_at - now).total_seconds() / 86400))

    if active:
        prorated = Decimal("0")
    else:
        period = settings.MEMBERSHIP_PERIOD_DAYS
        prorated = max(MIN_PRORATED_AMOUNT, full_price() - Decimal(remaining) * full_price() / period)
    return {
        "user_exists": True,
        "active": active,
        "remaining_days": remaining,
        "prorated_amount": prorated.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        "has_active_membership": active,
    }


def stash_signup(session_id: str, values: dict) -> None:
    cache.set(STASH_PREFIX + session_id, values, settings.SIGNUP_STASH_TIMEOUT)


def load_signup(session_id: str) -> dict:
    return cache.get(STASH_PREFIX + session_id) or {}


def clear_signup(session_id: str) -> None:
    cache.delete(STASH_PREFIX + session_id)


def start_checkout(*, email: str, name: str = "", phone: str = "", address: str = "", password: str = "",
                   user=None, product=None, restaurant=None):
    """Returns ``(session, amount_cents)``."""
    member = user if user is not None and user.is_authenticated else find_user_by_email(email)
    amount_cents = prorated_price_cents(current_membership(member))
    product = product or Product.objects.filter(active=True, interval=Product.INTERVAL_MONTH).first()
    logger.info("Membership checkout for %s: amount=%s cents product=%s", email, amount_cents,
                product.id if product else None)

    metadata = {
        "kind": "membership",
        "email": email,
        "name": name,
        "user_id": str(member.id) if member else "",
        "product_id": str(product.id) if product else "",
        "restaurant_id": str(restaurant.id) if restaurant else "",
    }
    params = {
        "payment_method_types": ["card"],
        "line_items": [
            {
                "price_data": {
                    "currency": settings.STRIPE_CURRENCY,
                    "product_data": {
                        "name": product.name if product else "EatMeetClub Membership",
                        "description": (product.description if product else "") or "Monthly dining club membership",
                    },
                    "unit_amount": amount_cents,
                    "recurring": {"interval": "month"},
                },
                "quantity": 1,
            },
        ],
        "mode": "subscription",
        "success_url": f"{settings.FRONTEND_URL}/membership-payment/success?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{settings.FRONTEND_URL}/become-member",
        "customer_email": email,
        "metadata": metadata,
    }
    if member is not None:
        params["client_reference_id"] = str(member.id)

    session = stripe_client.create_checkout_session(**params)
    stash_signup(session["id"], {
        "email": email,
        "name": name,
        "phone": phone,
        "address": address,
        "password_hash": make_password(password) if password else "",
    })
    logger.info("Membership checkout session created: %s", session["id"])
    return session, amount_cents


def verify_session_payment(session):
    """
    Returns ``(verified, amount_cents, subscription_id)`` for a checkout
    session.  Subscriptions must be active (or the session paid); one-off
    payments are checked through their PaymentIntent.
    """
    amount_cents = session.get("amount_total") or settings.MEMBERSHIP_PRICE_CENTS
    subscription_id = session.get("subscription") or ""
    paid = session.get("payment_status") == "paid"

    if subscription_id:
        subscription = stripe_client.retrieve_subscription(subscription_id)
        logger.info("Subscription %s status: %s", subscription_id, subscription.get("status"))
        items = (subscription.get("items") or {}).get("data") or []
        if items:
            amount_cents = items[0]["price"].get("unit_amount") or amount_cents
        return subscription.get("status") == "active" or paid, amount_cents, subscription_id

    if paid:
        return True, amount_cents, ""

    intent_id = session.get("payment_intent")
    if intent_id:
        intent = stripe_client.retrieve_payment_intent(intent_id)
        logger.info("PaymentIntent %s status: %s", intent_id, intent.get("status"))
        return intent.get("status") == "succeeded", intent.get("amount") or amount_cents, ""
    return False, amount_cents, ""


def _metadata_int(metadata, key):
    value = metadata.get(key)
    try:
        return int(value) if value else None
    except (TypeError, ValueError):
        return None


def _already_processed(payment):
    membership = payment.membership
    return {
        "user": membership.user,
        "membership": membership,
        "payment": payment,
        "user_created": False,
        "already_processed": True,
    }


def activate_from_checkout_session(session, user=None) -> dict:
    """
    Activate or renew the membership paid for by ``session``.

    ``user`` is the authenticated caller, if any; otherwise the account is
    looked up by email or created with ``needs_password`` set.  Returns a
    dict with ``user``, ``membership``, ``payment``, ``user_created`` and
    ``already_processed``.
    """
    from notifications.tasks import send_membership_invoice, send_welcome_email

    session_id = session["id"]
    existing = MembershipPayment.objects.select_related("membership__user").filter(payment_id=session_id).first()
    if existing is not None:
        logger.info("Membership payment %s already processed", session_id)
        return _already_processed(existing)

    verified, amount_cents, subscription_id = verify_session_payment(session)
    if not verified:
        logger.warning("Membership payment %s not verified", session_id)
        raise ValidationError("Payment verification failed")

    metadata = session.get("metadata") or {}
    stash = load_signup(session_id)
    customer_details = session.get("customer_details") or {}
    email = (
        stash.get("email")
        or metadata.get("email")
        or session.get("customer_email")
        or customer_details.get("email")
        or ""
    )
    name = stash.get("name") or metadata.get("name") or ""

    user_created = False
    if user is None or not user.is_authenticated:
        if not email:
            raise ValidationError("No email provided")
        user, user_created = get_or_create_member(
            email, name=name, phone=stash.get("phone", ""), address=stash.get("address", "")
        )
        if user_created and stash.get("password_hash"):
            user.password = stash["password_hash"]
            user.save(update_fields=["password"])
            user.profile.needs_password = False
            user.profile.save(update_fields=["needs_password", "updated_at"])

    receipt_url = stripe_client.receipt_url_for_session(session)
    now = timezone.now()
    renewal_at = now + timedelta(days=settings.MEMBERSHIP_PERIOD_DAYS)
    amount = Decimal(amount_cents) / 100

    try:
        with transaction.atomic():
            membership = (
                Membership.objects.select_for_update()
                .filter(user=user, status=Membership.STATUS_ACTIVE)
                .order_by("-started_at")
                .first()
            )
            if membership is None:
                membership = Membership(user=user)
            membership.status = Membership.STATUS_ACTIVE
            membership.is_subscription = bool(subscription_id)
            membership.started_at = now
            membership.renewal_at = renewal_at
            membership.subscription_id = subscription_id or membership.subscription_id
            membership.last_payment_id = session_id
            product_id = _metadata_int(metadata, "product_id")
            if product_id and Product.objects.filter(pk=product_id).exists():
                membership.product_id = product_id
            restaurant_id = _metadata_int(metadata, "restaurant_id")
            if restaurant_id and Restaurant.objects.filter(pk=restaurant_id).exists():
                membership.restaurant_id = restaurant_id
            membership.save()

            payment = MembershipPayment.objects.create(
                membership=membership,
                amount=amount,
                payment_id=session_id,
                receipt_url=receipt_url or "",
            )
            record_payment(
                user=user,
                email=user.email or email,
                amount=amount,
                kind=BillingRecord.KIND_MEMBERSHIP,
                payment_id=session_id,
                paid_at=now,
                expires_at=renewal_at,
                receipt_url=receipt_url,
            )
    except IntegrityError:
        existing = MembershipPayment.objects.select_related("membership__user").filter(payment_id=session_id).first()
        if existing is None:
            raise
        logger.info("Membership payment %s recorded concurrently", session_id)
        return _already_processed(existing)

    needs_password = user.profile.needs_password
    link = password_setup_link(user) if needs_password else ""
    display_name = name or user.profile.display_name
    transaction.on_commit(lambda: send_welcome_email.delay(user.email, display_name, True, link))
    transaction.on_commit(lambda: send_membership_invoice.delay(payment.id))
    clear_signup(session_id)

    logger.info("Membership %s active for user=%s until %s", membership.id, user.id, renewal_at)
    return {
        "user": user,
        "membership": membership,
        "payment": payment,
        "user_created": user_created,
        "already_processed": False,
    }


def expire_memberships(now=None) -> int:
    now = now or timezone.now()
    return Membership.objects.filter(
        status=Membership.STATUS_ACTIVE,
        renewal_at__lt=now,
    ).update(status=Membership.STATUS_EXPIRED)
