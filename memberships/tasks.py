"""
Celery tasks for the memberships app.

``activate_membership_from_session`` is queued by the Stripe webhook
when a subscription checkout completes; ``expire_memberships`` runs
from Celery Beat (see ``CELERY_BEAT_SCHEDULE``).
"""
from __future__ import annotations

import logging

from celery import shared_task
from rest_framework.exceptions import ValidationError

from payments import stripe_client

from . import services

logger = logging.getLogger("memberships")


@shared_task
def activate_membership_from_session(session_id: str) -> bool:
    """Activate the membership paid for by a completed checkout.

    Args:
        session_id: The Stripe Checkout Session identifier.

    Returns True when this call activated the membership, False when it
    was already processed or the payment could not be verified.
    """
    session = stripe_client.retrieve_checkout_session(session_id)
    try:
        result = services.activate_from_checkout_session(session)
    except ValidationError as e:
        logger.warning("Membership activation for session %s failed: %s", session_id, e.detail)
        return False
    return not result["already_processed"]


@shared_task
def expire_memberships() -> int:
    """Mark active memberships whose renewal date has passed as expired."""
    count = services.expire_memberships()
    if count:
        logger.info("Expired %s membership(s)", count)
    return count
