"""
Ticket purchase flow.

``start_checkout`` prices the order, opens a Stripe Checkout Session and
stores a pending ticket.  ``complete_ticket`` is shared by the verify
endpoint and the webhook and is idempotent on the ticket's status.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from billing.fees import get_fee_config, ticket_service_fee
from billing.models import BillingRecord
from billing.services import record_payment
from events.models import Event
from events.services import track_click, track_conversion

from . import stripe_client
from .models import Ticket

logger = logging.getLogger("payments")


def quote(event: Event, quantity: int) -> dict:
    unit_price = Decimal(event.price)
    subtotal = unit_price * quantity
    fee = ticket_service_fee(subtotal, quantity, get_fee_config())
    return {
        "unit_price": unit_price,
        "quantity": quantity,
        "subtotal": subtotal,
        "service_fee": fee,
        "total": subtotal + fee,
    }


def check_availability(event: Event, quantity: int) -> None:
    available = event.capacity - (event.tickets_sold or 0)
    if quantity > available:
        logger.info("Insufficient tickets for event=%s: available=%s requested=%s", event.id, available, quantity)
        raise ValidationError(f"Only {max(available, 0)} tickets available")


def start_checkout(user, event: Event, quantity: int, affiliate_code: str = "", ip_address: str = "",
                   user_agent: str = ""):
    """Returns ``(ticket, session)``."""
    check_availability(event, quantity)
    pricing = quote(event, quantity)
    logger.info(
        "Price calculation for event=%s: unit=%s qty=%s subtotal=%s fee=%s total=%s",
        event.id, pricing["unit_price"], quantity, pricing["subtotal"], pricing["service_fee"], pricing["total"],
    )

    currency = settings.STRIPE_CURRENCY
    line_items = [
        {
            "price_data": {
                "currency": currency,
                "product_data": {
                    "name": f"Ticket for {event.title}",
                    "description": f"{quantity} ticket(s) at ${pricing['unit_price']:.2f} each",
                },
                "unit_amount": stripe_client.to_cents(pricing["unit_price"]),
            },
            "quantity": quantity,
        },
    ]
    if pricing["service_fee"] > 0:
        line_items.append({
            "price_data": {
                "currency": currency,
                "product_data": {"name": "Service Fee"},
                "unit_amount": stripe_client.to_cents(pricing["service_fee"]),
            },
            "quantity": 1,
        })

    session = stripe_client.create_checkout_session(
        payment_method_types=["card"],
        line_items=line_items,
        mode="payment",
        success_url=f"{settings.FRONTEND_URL}/ticket-success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{settings.FRONTEND_URL}/event/{event.id}",
        client_reference_id=str(user.id),
        customer_email=user.email or None,
        metadata={
            "kind": "ticket",
            "event_id": str(event.id),
            "user_id": str(user.id),
            "quantity": str(quantity),
            "unit_price": str(pricing["unit_price"]),
            "service_fee": str(pricing["service_fee"]),
            "total_amount": str(pricing["total"]),
        },
    )
    logger.info("Checkout session created: %s", session["id"])

    link = None
    if affiliate_code:
        try:
            link = track_click(affiliate_code, event, referred_user=user, ip_address=ip_address,
                               user_agent=user_agent)
        except Exception as e:
            logger.warning("Affiliate click for code %s not recorded: %s", affiliate_code, e)

    ticket = Ticket.objects.create(
        user=user,
        event=event,
        quantity=quantity,
        price=pricing["unit_price"],
        service_fee=pricing["service_fee"],
        total_amount=pricing["total"],
        payment_id=session["id"],
        payment_status=Ticket.STATUS_PENDING,
        sold_by=link,
    )
    return ticket, session


def complete_ticket(ticket_id: int, receipt_url: str = "") -> bool:
    """
    Mark a pending ticket completed and apply its side effects.

    Returns False when the ticket was already completed.  The seat count,
    ledger row and status change commit together; the affiliate
    conversion and invoice email are best effort.
    """
    from notifications.tasks import send_ticket_invoice

    with transaction.atomic():
        ticket = Ticket.objects.select_for_update().select_related("user").get(pk=ticket_id)
        if ticket.payment_status == Ticket.STATUS_COMPLETED:
            return False
        ticket.payment_status = Ticket.STATUS_COMPLETED
        ticket.purchase_date = timezone.now()
        ticket.save(update_fields=["payment_status", "purchase_date", "updated_at"])
        Event.objects.filter(pk=ticket.event_id).update(tickets_sold=F("tickets_sold") + ticket.quantity)
        record_payment(
            user=ticket.user,
            email=ticket.user.email,
            amount=ticket.total_amount,
            kind=BillingRecord.KIND_TICKET,
            payment_id=ticket.payment_id,
            paid_at=ticket.purchase_date,
            receipt_url=receipt_url,
        )
        transaction.on_commit(lambda: send_ticket_invoice.delay(ticket.id, receipt_url))

    logger.info("Ticket %s completed for user=%s event=%s", ticket.id, ticket.user_id, ticket.event_id)
    try:
        track_conversion(ticket)
    except Exception as e:
        logger.warning("Affiliate conversion for ticket %s not recorded: %s", ticket.id, e)
    return True


def fail_tickets(payment_ids) -> int:
    return Ticket.objects.filter(
        payment_id__in=list(payment_ids),
        payment_status=Ticket.STATUS_PENDING,
    ).update(payment_status=Ticket.STATUS_FAILED)
