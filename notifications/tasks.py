"""
Celery tasks for the notifications app.

Every outbound message goes through one of these tasks so that the
request that triggered it never waits on SMTP or Twilio.  A failed
send is logged and reported as ``False``; it never raises back into
the caller.
"""
from __future__ import annotations

import logging

from celery import shared_task
from django.contrib.auth import get_user_model
from django.utils import timezone

from .emails import APP_NAME, send_plain_email, send_templated_email
from .sms import SMSError, send_sms

logger = logging.getLogger(__name__)

User = get_user_model()


@shared_task
def send_welcome_email(email: str, name: str = "", membership_active: bool = False,
                       password_link: str = "") -> bool:
    """Welcome a new user; ``password_link`` is set for accounts created at checkout."""
    try:
        send_templated_email(
            "welcome",
            f"Welcome to {APP_NAME}!",
            email,
            {
                "name": name or email.split("@")[0],
                "membership_active": membership_active,
                "password_link": password_link,
            },
        )
    except Exception as e:
        logger.exception("Welcome email to %s failed: %s", email, e)
        return False
    return True


@shared_task
def send_password_setup_email(user_id: int) -> bool:
    from users.services import password_setup_link

    user = User.objects.select_related("profile").filter(pk=user_id).first()
    if not user or not user.email:
        logger.warning("send_password_setup_email: user %s not found", user_id)
        return False
    try:
        send_templated_email(
            "password_setup",
            f"Set your {APP_NAME} password",
            user.email,
            {"name": user.profile.display_name, "password_link": password_setup_link(user)},
        )
    except Exception as e:
        logger.exception("Password setup email to %s failed: %s", user.email, e)
        return False
    return True


@shared_task
def send_ticket_invoice(ticket_id: int, receipt_url: str = "") -> bool:
    """Email the purchase invoice for a completed ticket."""
    from payments.models import Ticket

    ticket = (
        Ticket.objects.select_related("event__restaurant", "user__profile")
        .filter(pk=ticket_id)
        .first()
    )
    if ticket is None:
        logger.warning("send_ticket_invoice: ticket %s not found", ticket_id)
        return False

    event = ticket.event
    restaurant = event.restaurant
    location = ", ".join(p for p in [restaurant.name, restaurant.address, restaurant.city] if p)
    context = {
        "name": ticket.user.profile.display_name,
        "ticket": ticket,
        "event": event,
        "location": location,
        "subtotal": ticket.price * ticket.quantity,
        "purchase_date": ticket.purchase_date or timezone.now(),
        "receipt_url": receipt_url,
    }
    try:
        send_templated_email(
            "ticket_invoice",
            f"Your {APP_NAME} Invoice - {event.title}",
            ticket.user.email,
            context,
        )
    except Exception as e:
        logger.exception("Invoice email for ticket %s failed: %s", ticket_id, e)
        return False
    return True


@shared_task
def send_membership_invoice(payment_id: int) -> bool:
    from memberships.models import MembershipPayment

    payment = (
        MembershipPayment.objects.select_related("membership__user__profile")
        .filter(pk=payment_id)
        .first()
    )
    if payment is None:
        logger.warning("send_membership_invoice: payment %s not found", payment_id)
        return False

    user = payment.membership.user
    try:
        send_templated_email(
            "membership_invoice",
            f"Your {APP_NAME} Membership Invoice",
            user.email,
            {
                "name": user.profile.display_name,
                "payment": payment,
                "membership": payment.membership,
            },
        )
    except Exception as e:
        logger.exception("Membership invoice %s failed: %s", payment_id, e)
        return False
    return True


@shared_task
def send_member_notification(email: str, name: str, phone: str = "") -> dict:
    """
    Confirmation sent when someone submits the membership form.

    The email and the SMS are independent; the result reports each.
    """
    result = {"email": False, "sms": False}
    try:
        send_templated_email(
            "member_notification",
            f"Welcome to {APP_NAME} - Membership Confirmation",
            email,
            {"name": name},
        )
        result["email"] = True
    except Exception as e:
        logger.exception("Member notification email to %s failed: %s", email, e)

    if phone:
        body = (
            f"Hi {name}! Thanks for joining {APP_NAME}. "
            "Complete your payment to activate your membership."
        )
        try:
            result["sms"] = send_sms(phone, body) is not None
        except SMSError as e:
            logger.warning("Member notification SMS to %s failed: %s", phone, e)
    return result


@shared_task
def send_custom_email(to: str, subject: str, body: str, html_body: str = "") -> bool:
    try:
        send_plain_email(subject, body, to, html_body=html_body or None)
    except Exception as e:
        logger.exception("Custom email to %s failed: %s", to, e)
        return False
    return True
