"""
Affiliate link helpers for the events app.

A link code is built from the promoter's name (``first-last``) or email
local part plus the start of the event key, lower-cased and reduced to
``[a-z0-9-]``.
"""
import logging
import re
from decimal import Decimal

from django.db.models import Count, Q, Sum

from .models import AffiliateLink, AffiliateTracking

logger = logging.getLogger(__name__)

_CODE_STRIP_RE = re.compile(r"[^a-z0-9-]")


def referral_code(user, event) -> str:
    profile = getattr(user, "profile", None)
    full_name = (getattr(profile, "full_name", "") or "").strip()
    if full_name:
        parts = full_name.split()
        base = f"{parts[0]}-{parts[-1]}" if len(parts) > 1 else parts[0]
    elif user.email:
        base = user.email.split("@")[0]
    else:
        base = str(user.pk)
    code = f"{base}-{str(event.pk)[:6]}".lower()
    return _CODE_STRIP_RE.sub("", code)


def get_or_create_link(user, event) -> AffiliateLink:
    """One link per (user, event); a numeric suffix resolves code collisions."""
    link = AffiliateLink.objects.filter(user=user, event=event).first()
    if link:
        return link
    base = referral_code(user, event)
    code, n = base, 1
    while AffiliateLink.objects.filter(code=code).exists():
        n += 1
        code = f"{base}-{n}"
    return AffiliateLink.objects.create(user=user, event=event, code=code)


def track_click(code: str, event, referred_user=None, ip_address="", user_agent=""):
    """Record a click for ``code`` on ``event``; returns the link or None when the code is unknown."""
    link = AffiliateLink.objects.filter(code=code, event=event).first()
    if link is None:
        logger.info("No affiliate link found for code %s", code)
        return None
    AffiliateTracking.objects.create(
        affiliate_link=link,
        event=event,
        action_type=AffiliateTracking.ACTION_CLICK,
        referred_user=referred_user if referred_user and referred_user.is_authenticated else None,
        ip_address=ip_address or "",
        user_agent=(user_agent or "")[:255],
    )
    return link


def track_conversion(ticket) -> None:
    if not ticket.sold_by_id:
        return
    AffiliateTracking.objects.create(
        affiliate_link_id=ticket.sold_by_id,
        event_id=ticket.event_id,
        action_type=AffiliateTracking.ACTION_CONVERSION,
        referred_user_id=ticket.user_id,
        ticket=ticket,
        conversion_value=ticket.total_amount,
    )


def link_stats(link) -> dict:
    agg = link.tracking.aggregate(
        clicks=Count("id", filter=Q(action_type=AffiliateTracking.ACTION_CLICK)),
        conversions=Count("id", filter=Q(action_type=AffiliateTracking.ACTION_CONVERSION)),
        revenue=Sum("conversion_value", filter=Q(action_type=AffiliateTracking.ACTION_CONVERSION)),
    )
    clicks = agg["clicks"] or 0
    conversions = agg["conversions"] or 0
    rate = (conversions / clicks) * 100 if clicks else 0.0
    return {
        "clicks": clicks,
        "conversions": conversions,
        "conversion_rate": round(rate, 2),
        "revenue": agg["revenue"] or Decimal("0"),
    }
