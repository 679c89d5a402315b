"""
Billing ledger queries and revenue aggregation.

``filter_records`` and ``total_revenue`` work on the filtered view;
``revenue_by_month`` always covers every record visible to the caller.
Month keys are ``YYYY-MM`` of ``paid_at`` in UTC.
"""
import datetime
import logging
from collections import defaultdict
from decimal import Decimal

from django.db import IntegrityError, transaction

from common.permissions import is_admin

from .models import BillingRecord

logger = logging.getLogger(__name__)


def month_key(ts: datetime.datetime) -> str:
    if ts.tzinfo is not None:
        ts = ts.astimezone(datetime.timezone.utc)
    return ts.strftime("%Y-%m")


def visible_records(user):
    """Admins see the whole ledger; everyone else only rows for their own email."""
    qs = BillingRecord.objects.order_by("-paid_at")
    if is_admin(user):
        return qs
    return qs.filter(email__iexact=user.email or "")


def filter_records(records, search: str = "", month: str = ""):
    search = (search or "").strip().lower()
    month = (month or "").strip()
    return [
        r for r in records
        if search in (r.email or "").lower()
        and (not month or month_key(r.paid_at) == month)
    ]


def total_revenue(records) -> Decimal:
    return sum((r.amount for r in records), Decimal("0"))


def revenue_by_month(records) -> list:
    totals = defaultdict(lambda: Decimal("0"))
    for r in records:
        totals[month_key(r.paid_at)] += r.amount
    return [{"month": m, "total": totals[m]} for m in sorted(totals)]


def record_payment(*, email, amount, kind, payment_id, paid_at, user=None, expires_at=None, receipt_url=""):
    """
    Write one ledger row per payment id.

    Returns ``(record, created)``; a repeated payment id returns the
    existing row unchanged.
    """
    existing = BillingRecord.objects.filter(payment_id=payment_id).first()
    if existing:
        return existing, False
    try:
        with transaction.atomic():
            record = BillingRecord.objects.create(
                user=user,
                email=email,
                amount=amount,
                kind=kind,
                payment_id=payment_id,
                paid_at=paid_at,
                expires_at=expires_at,
                receipt_url=receipt_url or "",
            )
    except IntegrityError:
        return BillingRecord.objects.get(payment_id=payment_id), False
    logger.info("Billing record %s: %s %s for %s", payment_id, kind, amount, email)
    return record, True
