"""
SMS delivery through the Twilio REST API.

Only the Messages endpoint is used, so this talks to it directly with
``requests`` rather than pulling in the Twilio SDK.  When no account is
configured the message is logged and skipped.
"""
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class SMSError(RuntimeError):
    pass


def sms_configured() -> bool:
    return bool(
        settings.TWILIO_ACCOUNT_SID
        and settings.TWILIO_AUTH_TOKEN
        and settings.TWILIO_FROM_NUMBER
    )


def send_sms(to: str, body: str) -> str | None:
    """Send ``body`` to ``to``; returns the Twilio message SID or None if skipped."""
    if not sms_configured():
        logger.info("SMS not configured; skipping message to %s", to)
        return None

    sid = settings.TWILIO_ACCOUNT_SID
    try:
        resp = requests.post(
            f"{TWILIO_API_BASE}/Accounts/{sid}/Messages.json",
            data={"To": to, "From": settings.TWILIO_FROM_NUMBER, "Body": body},
            auth=(sid, settings.TWILIO_AUTH_TOKEN),
            timeout=10,
        )
    except requests.RequestException as e:
        logger.exception("Twilio request failed for %s: %s", to, e)
        raise SMSError(str(e))

    if resp.status_code not in (200, 201):
        logger.error("Twilio send failed (%s): %s", resp.status_code, resp.text[:500])
        raise SMSError(f"Twilio send failed ({resp.status_code})")

    return (resp.json() or {}).get("sid")
