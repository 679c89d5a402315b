"""
Tests for authentication and profile management in the users app.

This module covers registration, email login via JWT, the ``/me/``
endpoint, password setup for accounts created at checkout and the
admin user directory.
"""
from urllib.parse import parse_qs, urlparse

import pytest
from django.contrib.auth.models import User
from django.core import mail

from users.services import get_or_create_member, password_setup_link


@pytest.mark.django_db
def test_register_and_login(client):
    """Ensure a new user can register and obtain a JWT token."""
    payload = {
        "email": "Alice@Eatmeet.club",
        "password": "Dinner-Party-42",
        "full_name": "Alice A",
        "phone_number": "(512) 555-0101",
    }
    response = client.post("/api/auth/register/", payload, content_type="application/json")
    assert response.status_code == 201, response.content
    body = response.json()
    assert body["email"] == "alice@eatmeet.club"
    assert body["profile"]["full_name"] == "Alice A"
    assert body["profile"]["phone"] == "5125550101"
    assert "access" in body

    login_resp = client.post(
        "/api/auth/login/",
        {"email": "alice@eatmeet.club", "password": "Dinner-Party-42"},
        content_type="application/json",
    )
    assert login_resp.status_code == 200
    assert "access" in login_resp.json()
    assert len(mail.outbox) == 1


@pytest.mark.django_db
def test_register_rejects_short_password_and_duplicate_email(client, user):
    resp = client.post(
        "/api/auth/register/",
        {"email": "new@eatmeet.club", "password": "abc"},
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "password: Password must be at least 6 characters long"

    resp = client.post(
        "/api/auth/register/",
        {"email": user.email.upper(), "password": "Dinner-Party-42"},
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert "already exists" in resp.json()["error"]


@pytest.mark.django_db
def test_login_with_wrong_password(client, user):
    resp = client.post(
        "/api/auth/login/",
        {"email": user.email, "password": "nope-nope"},
        content_type="application/json",
    )
    assert resp.status_code == 401


@pytest.mark.django_db
def test_me_endpoint(auth_client):
    """Verify that the me endpoint returns and updates user info."""
    response = auth_client.get("/api/auth/me/")
    assert response.status_code == 200
    assert response.json()["email"] == "u1@eatmeet.club"
    assert response.json()["is_admin"] is False

    update_resp = auth_client.patch(
        "/api/auth/me/",
        {"profile": {"address": "1 Main Street"}},
        content_type="application/json",
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["profile"]["address"] == "1 Main Street"
    assert update_resp.json()["profile"]["full_name"] == "Ada Lovelace"


@pytest.mark.django_db
def test_me_requires_authentication(client):
    assert client.get("/api/auth/me/").status_code == 401


@pytest.mark.django_db
def test_checkout_account_sets_password_from_link(client):
    member, created = get_or_create_member("Guest@Eatmeet.club", name="Guest Diner")
    assert created
    assert member.profile.needs_password
    assert member.profile.full_name == "Guest Diner"
    assert User.objects.get(pk=member.pk).profile.needs_password
    assert not member.has_usable_password()

    query = parse_qs(urlparse(password_setup_link(member)).query)
    resp = client.post(
        "/api/auth/password/set/",
        {
            "uid": query["uid"][0],
            "token": query["token"][0],
            "password": "Supper-Club-2024",
            "confirm_password": "Supper-Club-2024",
        },
        content_type="application/json",
    )
    assert resp.status_code == 200, resp.content
    assert "access" in resp.json()

    member.refresh_from_db()
    assert member.check_password("Supper-Club-2024")
    assert member.profile.needs_password is False


@pytest.mark.django_db
def test_set_password_rejects_bad_token(client, user):
    resp = client.post(
        "/api/auth/password/set/",
        {"uid": "MQ", "token": "bad-token", "password": "Supper-Club-2024", "confirm_password": "Supper-Club-2024"},
        content_type="application/json",
    )
    assert resp.status_code == 400


@pytest.mark.django_db
def test_forgot_password_does_not_leak(client, user):
    resp = client.post("/api/auth/password/forgot/", {"email": "nobody@eatmeet.club"},
                       content_type="application/json")
    assert resp.status_code == 200
    assert len(mail.outbox) == 0

    resp = client.post("/api/auth/password/forgot/", {"email": user.email}, content_type="application/json")
    assert resp.status_code == 200
    assert len(mail.outbox) == 1
    assert "set-password" in mail.outbox[0].body


@pytest.mark.django_db
def test_get_or_create_member_reuses_existing_account(user):
    member, created = get_or_create_member(user.email.upper())
    assert member == user
    assert created is False
    assert User.objects.count() == 1


@pytest.mark.django_db
def test_admin_user_directory(admin_api_client, auth_client, user):
    assert auth_client.get("/api/admin/users/").status_code == 403

    resp = admin_api_client.get("/api/admin/users/?q=lovelace")
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert [r["email"] for r in results] == [user.email]

    resp = admin_api_client.patch(
        f"/api/admin/users/{user.id}/", {"role": "admin"}, content_type="application/json"
    )
    assert resp.status_code == 200
    user.refresh_from_db()
    assert user.profile.role == "admin"
