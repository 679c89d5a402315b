"""
Email utilities.

Centralizes email sending so that every message is rendered from a
``.txt`` and ``.html`` template pair under ``templates/emails/`` and
sent from ``DEFAULT_FROM_EMAIL``.
"""
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)

APP_NAME = "Eat Meet Club"


def base_context(**extra):
    ctx = {
        "app_name": APP_NAME,
        "frontend_url": settings.FRONTEND_URL,
        "support_email": settings.SUPPORT_EMAIL,
    }
    ctx.update(extra)
    return ctx


def send_templated_email(template: str, subject: str, to: str, context: dict) -> int:
    """
    Render ``emails/<template>.txt`` / ``.html`` and send them.

    Returns the number of messages sent (0 or 1).  Errors propagate so
    that the calling task decides whether to swallow or retry.
    """
    ctx = base_context(**context)
    text_body = render_to_string(f"emails/{template}.txt", ctx)
    html_body = render_to_string(f"emails/{template}.html", ctx)
    sent = send_mail(
        subject=subject,
        message=text_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[to],
        html_message=html_body,
        fail_silently=False,
    )
    logger.info("Sent %s email to %s", template, to)
    return sent


def send_plain_email(subject: str, body: str, to: str, html_body: str | None = None) -> int:
    return send_mail(
        subject=subject,
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[to],
        html_message=html_body,
        fail_silently=False,
    )
