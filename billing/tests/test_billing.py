"""
Tests for the billing ledger and the platform fee settings.
"""
import datetime
from decimal import Decimal

import pytest

from billing.fees import FeeConfigError, apply_commission, update_fee_config
from billing.models import BillingRecord
from billing.services import record_payment

UTC = datetime.timezone.utc


def _record(email, amount, paid_at, kind=BillingRecord.KIND_TICKET, payment_id=None):
    record, _ = record_payment(
        email=email,
        amount=Decimal(amount),
        kind=kind,
        payment_id=payment_id or f"pay_{email}_{paid_at:%Y%m%d%H}",
        paid_at=paid_at,
    )
    return record


@pytest.fixture
def ledger(user, other_user):
    return [
        _record(user.email, "42.00", datetime.datetime(2024, 1, 15, 12, tzinfo=UTC)),
        _record(user.email, "25.00", datetime.datetime(2024, 2, 3, 9, tzinfo=UTC), kind=BillingRecord.KIND_MEMBERSHIP),
        _record(other_user.email, "84.00", datetime.datetime(2024, 2, 20, 18, tzinfo=UTC)),
    ]


@pytest.mark.django_db
def test_record_payment_is_unique_per_payment_id(user):
    paid_at = datetime.datetime(2024, 3, 1, tzinfo=UTC)
    first, created = record_payment(email=user.email, amount=Decimal("10"), kind="ticket",
                                    payment_id="cs_once", paid_at=paid_at)
    again, created_again = record_payment(email=user.email, amount=Decimal("99"), kind="ticket",
                                          payment_id="cs_once", paid_at=paid_at)
    assert created is True
    assert created_again is False
    assert again.pk == first.pk
    assert again.amount == Decimal("10")


@pytest.mark.django_db
def test_members_see_only_their_records(auth_client, ledger):
    resp = auth_client.get("/api/billing/records/")
    assert resp.status_code == 200
    emails = {r["email"] for r in resp.json()["results"]}
    assert emails == {"u1@eatmeet.club"}


@pytest.mark.django_db
def test_admin_summary_filters_and_monthly_revenue(admin_api_client, ledger):
    resp = admin_api_client.get("/api/billing/records/summary/?month=2024-02")
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert Decimal(body["total_revenue"]) == Decimal("109.00")
    # Monthly revenue ignores the filters
    assert [(row["month"], Decimal(row["total"])) for row in body["revenue_by_month"]] == [
        ("2024-01", Decimal("42.00")),
        ("2024-02", Decimal("109.00")),
    ]

    resp = admin_api_client.get("/api/billing/records/?search=U2@")
    assert [r["amount"] for r in resp.json()["results"]] == ["84.00"]


@pytest.mark.django_db
def test_billing_requires_login(client, ledger):
    assert client.get("/api/billing/records/").status_code == 401


def test_apply_commission():
    assert apply_commission(Decimal("80"), 2, "percentage", Decimal("5")) == Decimal("4.00")
    assert apply_commission(Decimal("80"), 2, "flat", Decimal("1.25")) == Decimal("2.50")
    assert apply_commission(Decimal("33.33"), 1, "percentage", Decimal("10")) == Decimal("3.33")


@pytest.mark.django_db
def test_fee_config_endpoint(admin_api_client, auth_client):
    resp = admin_api_client.get("/api/admin-config/fees/")
    assert resp.status_code == 200
    assert resp.json()["ticket_commission_type"] == "percentage"

    resp = admin_api_client.patch(
        "/api/admin-config/fees/",
        {"ticket_commission_type": "flat", "ticket_commission_value": "3"},
        content_type="application/json",
    )
    assert resp.status_code == 200
    assert resp.json()["ticket_commission_type"] == "flat"
    assert Decimal(resp.json()["ticket_commission_value"]) == Decimal("3")

    resp = admin_api_client.put(
        "/api/admin-config/fees/", {"ticket_commission_value": "-1"}, content_type="application/json"
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "ticket_commission_value must be a number >= 0"

    assert auth_client.get("/api/admin-config/fees/").status_code == 403


@pytest.mark.django_db
def test_update_fee_config_rejects_unknown_keys_atomically():
    with pytest.raises(FeeConfigError):
        update_fee_config({"ticket_commission_value": "7", "surprise": "1"})
    from billing.fees import get_fee_config

    assert get_fee_config()["ticket_commission_value"] == Decimal("5")
