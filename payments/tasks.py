"""
Celery tasks for the payments app.

These tasks decouple processing of successful payments from the
request/response cycle.  When a Stripe webhook reports a completed
checkout, a task fetches the receipt and completes the matching
ticket.
"""
from __future__ import annotations

import logging

from celery import shared_task

from . import stripe_client
from .models import Ticket
from .services import complete_ticket

logger = logging.getLogger("payments")


@shared_task
def process_ticket_payment(session_id: str) -> bool:
    """Complete the ticket opened with Checkout Session ``session_id``.

    Args:
        session_id: The Stripe Checkout Session identifier stored as the
            ticket's ``payment_id``.

    Returns True when this call completed the ticket, False when it was
    already completed, missing or not paid.
    """
    ticket = Ticket.objects.filter(payment_id=session_id).first()
    if ticket is None:
        logger.warning("process_ticket_payment: no ticket for session %s", session_id)
        return False
    if ticket.payment_status == Ticket.STATUS_COMPLETED:
        return False
    session = stripe_client.retrieve_checkout_session(session_id)
    if session.get("payment_status") != "paid":
        logger.info("Session %s not paid yet (%s)", session_id, session.get("payment_status"))
        return False
    return complete_ticket(ticket.id, receipt_url=stripe_client.receipt_url_for_session(session))
