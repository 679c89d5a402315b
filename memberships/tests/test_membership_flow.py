"""
Tests for the membership signup wizard.

Stripe is patched at ``payments.stripe_client``; activation runs the
same code path for the verify endpoint and the webhook task.
"""
from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.contrib.auth.models import User
from django.core import mail
from django.db import IntegrityError
from django.test import Client
from django.utils import timezone

from billing.models import BillingRecord
from memberships import services
from memberships.models import Membership, MembershipPayment, Product
from memberships.tasks import activate_membership_from_session, expire_memberships

SESSION_ID = "cs_test_membership_1"

FORM = {
    "name": "Margaret Hamilton",
    "email": "Margaret@EatMeet.club",
    "phone": "(512) 555-0142",
    "address": "1 Apollo Way, Austin TX",
    "password": "moonshot",
}


def _subscription_session(email="margaret@eatmeet.club", **overrides):
    session = {
        "id": SESSION_ID,
        "mode": "subscription",
        "payment_status": "paid",
        "subscription": "sub_123",
        "customer_email": email,
        "metadata": {"kind": "membership", "email": email, "name": "Margaret Hamilton"},
    }
    session.update(overrides)
    return session


@pytest.fixture
def stripe_api():
    with mock.patch("payments.stripe_client.create_checkout_session") as create, \
            mock.patch("payments.stripe_client.retrieve_checkout_session") as retrieve, \
            mock.patch("payments.stripe_client.retrieve_subscription") as subscription, \
            mock.patch("payments.stripe_client.receipt_url_for_session") as receipt:
        create.return_value = {"id": SESSION_ID, "url": "https://checkout.stripe.test/" + SESSION_ID}
        retrieve.return_value = _subscription_session()
        subscription.return_value = {"status": "active", "items": {"data": [{"price": {"unit_amount": 2500}}]}}
        receipt.return_value = "https://invoice.stripe.test/i_1"
        yield {"create": create, "retrieve": retrieve, "subscription": subscription}


def _membership(user, started_days_ago, status=Membership.STATUS_ACTIVE):
    started = timezone.now() - timedelta(days=started_days_ago)
    return Membership.objects.create(
        user=user,
        status=status,
        started_at=started,
        renewal_at=started + timedelta(days=30),
    )


@pytest.mark.django_db
def test_signup_step_validates_account_fields(user):
    anon = Client()
    resp = anon.post("/api/memberships/signup/", {"email": "new@eatmeet.club", "password": "abc"},
                     content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "password: Password must be at least 6 characters long"

    resp = anon.post("/api/memberships/signup/", {"email": "not-an-email", "password": "abcdef"},
                     content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "email: Please enter a valid email address"

    resp = anon.post("/api/memberships/signup/", {"email": "U1@eatmeet.club", "password": "abcdef"},
                     content_type="application/json")
    assert resp.status_code == 200
    assert resp.json() == {"valid": True, "email": "u1@eatmeet.club", "user_exists": True}


@pytest.mark.django_db
def test_form_step_reports_price_for_new_visitor():
    resp = Client().post("/api/memberships/form/", FORM, content_type="application/json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["valid"] is True
    assert body["user_exists"] is False
    assert body["active"] is False
    assert Decimal(str(body["prorated_amount"])) == Decimal("25.00")

    resp = Client().post("/api/memberships/form/", {**FORM, "name": "M", "address": "here"},
                         content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "name: Name must be at least 2 characters"


@pytest.mark.django_db
def test_status_for_lapsed_and_active_members(user, other_user):
    _membership(user, started_days_ago=20)
    status = services.status_for_email(user.email)
    assert status["active"] is True
    assert status["has_active_membership"] is True
    assert status["remaining_days"] == 10
    assert status["prorated_amount"] == Decimal("0.00")

    canceled = _membership(other_user, started_days_ago=18, status=Membership.STATUS_CANCELED)
    status = services.status_for_email(other_user.email)
    assert status["active"] is False
    assert status["remaining_days"] == 12
    # 25 - 12 * 25 / 30
    assert status["prorated_amount"] == Decimal("15.00")

    canceled.renewal_at = timezone.now() + timedelta(days=29)
    canceled.save()
    assert services.status_for_email(other_user.email)["prorated_amount"] == Decimal("5.00")


@pytest.mark.django_db
def test_status_endpoint_requires_email():
    resp = Client().post("/api/memberships/status/", {}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "email: Email is required"


@pytest.mark.django_db
def test_checkout_for_new_visitor_stashes_form(stripe_api):
    resp = Client().post("/api/memberships/checkout/", FORM, content_type="application/json")
    assert resp.status_code == 201, resp.content
    body = resp.json()
    assert body["session_id"] == SESSION_ID
    assert body["amount_cents"] == 2500
    assert body["prorated"] is False

    params = stripe_api["create"].call_args.kwargs
    assert params["mode"] == "subscription"
    assert params["line_items"][0]["price_data"]["recurring"] == {"interval": "month"}
    assert params["metadata"]["email"] == "margaret@eatmeet.club"
    assert "client_reference_id" not in params

    stash = services.load_signup(SESSION_ID)
    assert stash["phone"] == "5125550142"
    assert stash["password_hash"] and stash["password_hash"] != "moonshot"


@pytest.mark.django_db
def test_renewal_price_depends_on_days_left(user, stripe_api):
    membership = _membership(user, started_days_ago=20)
    payload = {**FORM, "email": user.email}

    resp = Client().post("/api/memberships/checkout/", payload, content_type="application/json")
    assert resp.status_code == 201
    assert resp.json()["amount_cents"] == 1250
    assert resp.json()["prorated"] is True

    membership.started_at = timezone.now() - timedelta(days=5)
    membership.save()
    resp = Client().post("/api/memberships/checkout/", payload, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Active membership exists with >15 days remaining"


@pytest.mark.django_db
def test_verify_creates_member_and_activates(stripe_api, django_capture_on_commit_callbacks):
    Client().post("/api/memberships/checkout/", FORM, content_type="application/json")

    with django_capture_on_commit_callbacks(execute=True):
        resp = Client().post("/api/memberships/verify/", {"session_id": SESSION_ID},
                             content_type="application/json")
    assert resp.status_code == 200, resp.content
    body = resp.json()
    assert body["success"] is True
    assert body["user_created"] is True
    assert body["already_processed"] is False
    # The wizard collected a password, so none needs to be set
    assert body["needs_password"] is False
    assert body["membership"]["status"] == "active"
    assert body["membership"]["is_subscription"] is True

    member = User.objects.get(email="margaret@eatmeet.club")
    assert member.check_password("moonshot")
    assert member.profile.full_name == "Margaret Hamilton"

    membership = Membership.objects.get(user=member)
    assert membership.subscription_id == "sub_123"
    assert membership.renewal_at - membership.started_at == timedelta(days=30)

    payment = MembershipPayment.objects.get(payment_id=SESSION_ID)
    assert payment.amount == Decimal("25.00")
    record = BillingRecord.objects.get(payment_id=SESSION_ID)
    assert record.kind == BillingRecord.KIND_MEMBERSHIP
    assert record.expires_at == membership.renewal_at

    assert sorted(m.subject for m in mail.outbox) == [
        "Welcome to Eat Meet Club!",
        "Your Eat Meet Club Membership Invoice",
    ]
    assert services.load_signup(SESSION_ID) == {}


@pytest.mark.django_db
def test_verify_is_idempotent(stripe_api):
    Client().post("/api/memberships/checkout/", FORM, content_type="application/json")
    Client().post("/api/memberships/verify/", {"session_id": SESSION_ID}, content_type="application/json")

    resp = Client().post("/api/memberships/verify/", {"session_id": SESSION_ID}, content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["already_processed"] is True
    assert MembershipPayment.objects.count() == 1
    assert Membership.objects.count() == 1


@pytest.mark.django_db
def test_member_without_password_gets_setup_link(stripe_api, django_capture_on_commit_callbacks):
    stripe_api["retrieve"].return_value = _subscription_session(email="nopass@eatmeet.club")

    with django_capture_on_commit_callbacks(execute=True):
        resp = Client().post("/api/memberships/verify/", {"session_id": SESSION_ID},
                             content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["needs_password"] is True
    welcome = next(m for m in mail.outbox if m.subject.startswith("Welcome"))
    assert "http://testserver-frontend/set-password?uid=" in welcome.body


@pytest.mark.django_db
def test_unverified_payment_is_rejected(stripe_api):
    stripe_api["retrieve"].return_value = _subscription_session(payment_status="unpaid")
    stripe_api["subscription"].return_value = {"status": "incomplete", "items": {"data": []}}

    resp = Client().post("/api/memberships/verify/", {"session_id": SESSION_ID}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Payment verification failed"
    assert not Membership.objects.exists()


@pytest.mark.django_db
def test_one_time_payment_is_verified_through_intent(user):
    session = _subscription_session(email=user.email, subscription=None, payment_status="unpaid",
                                    payment_intent="pi_1")
    with mock.patch("payments.stripe_client.retrieve_payment_intent",
                    return_value={"status": "succeeded", "amount": 1250}):
        assert services.verify_session_payment(session) == (True, 1250, "")


@pytest.mark.django_db
def test_renewal_extends_existing_membership(user, auth_client, stripe_api):
    membership = _membership(user, started_days_ago=25)
    stripe_api["retrieve"].return_value = _subscription_session(email=user.email)

    resp = auth_client.post("/api/memberships/verify/", {"session_id": SESSION_ID},
                            content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["user_created"] is False

    membership.refresh_from_db()
    assert Membership.objects.filter(user=user).count() == 1
    assert membership.renewal_at > timezone.now() + timedelta(days=29)
    assert membership.last_payment_id == SESSION_ID


@pytest.mark.django_db
def test_webhook_task_activates_once(stripe_api):
    assert activate_membership_from_session(SESSION_ID) is True
    assert activate_membership_from_session(SESSION_ID) is False
    assert MembershipPayment.objects.count() == 1


@pytest.mark.django_db
def test_checkout_rejects_unknown_restaurant(stripe_api):
    resp = Client().post(
        "/api/memberships/checkout/", {**FORM, "restaurant_id": 999999}, content_type="application/json"
    )
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("restaurant_id: ")
    stripe_api["create"].assert_not_called()


@pytest.mark.django_db
def test_membership_records_referring_restaurant(restaurant, stripe_api):
    resp = Client().post(
        "/api/memberships/checkout/", {**FORM, "restaurant_id": restaurant.id}, content_type="application/json"
    )
    assert resp.status_code == 201, resp.content
    metadata = stripe_api["create"].call_args.kwargs["metadata"]
    assert metadata["restaurant_id"] == str(restaurant.id)

    stripe_api["retrieve"].return_value = _subscription_session(metadata=metadata)
    resp = Client().post("/api/memberships/verify/", {"session_id": SESSION_ID}, content_type="application/json")
    assert resp.status_code == 200, resp.content
    assert Membership.objects.get(user__email="margaret@eatmeet.club").restaurant == restaurant


@pytest.mark.django_db(transaction=True)
def test_activation_skips_restaurant_that_no_longer_exists(stripe_api):
    # Foreign keys are only checked at commit, so this needs a real transaction
    stripe_api["retrieve"].return_value = _subscription_session(metadata={
        "kind": "membership",
        "email": "margaret@eatmeet.club",
        "name": "Margaret Hamilton",
        "restaurant_id": "999999",
    })
    resp = Client().post("/api/memberships/verify/", {"session_id": SESSION_ID}, content_type="application/json")
    assert resp.status_code == 200, resp.content

    membership = Membership.objects.get(user__email="margaret@eatmeet.club")
    assert membership.status == Membership.STATUS_ACTIVE
    assert membership.restaurant_id is None
    assert MembershipPayment.objects.filter(payment_id=SESSION_ID).count() == 1
    assert BillingRecord.objects.filter(payment_id=SESSION_ID).count() == 1


@pytest.mark.django_db
def test_activation_reraises_integrity_error_without_payment(stripe_api):
    with mock.patch("memberships.services.record_payment", side_effect=IntegrityError("boom")):
        with pytest.raises(IntegrityError):
            services.activate_from_checkout_session(_subscription_session())
    assert not MembershipPayment.objects.exists()


@pytest.mark.django_db
def test_my_membership_and_payments(user, auth_client, other_client, admin_api_client, stripe_api):
    resp = auth_client.get("/api/memberships/me/")
    assert resp.json() == {"membership": None, "is_active": False}

    stripe_api["retrieve"].return_value = _subscription_session(email=user.email)
    auth_client.post("/api/memberships/verify/", {"session_id": SESSION_ID}, content_type="application/json")

    resp = auth_client.get("/api/memberships/me/")
    assert resp.json()["is_active"] is True

    payments = auth_client.get("/api/memberships/payments/").json()["results"]
    assert [p["email"] for p in payments] == [user.email]
    assert other_client.get("/api/memberships/payments/").json()["results"] == []
    assert len(admin_api_client.get("/api/memberships/payments/").json()["results"]) == 1


@pytest.mark.django_db
def test_expire_memberships(user, other_user):
    lapsed = _membership(user, started_days_ago=31)
    current = _membership(other_user, started_days_ago=3)

    assert expire_memberships() == 1
    lapsed.refresh_from_db()
    current.refresh_from_db()
    assert lapsed.status == Membership.STATUS_EXPIRED
    assert current.status == Membership.STATUS_ACTIVE
    assert lapsed.is_active is False


@pytest.mark.django_db
def test_product_list_shows_active_products():
    Product.objects.create(name="Monthly", price_cents=2500)
    Product.objects.create(name="Legacy", price_cents=1500, active=False)
    resp = Client().get("/api/memberships/products/")
    assert [p["name"] for p in resp.json()] == ["Monthly"]
