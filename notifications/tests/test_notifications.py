"""
Tests for the notification endpoints and tasks.

Celery runs eagerly in tests, so queued messages land in the locmem
outbox straight away.  Twilio is patched at ``requests.post``.
"""
from unittest import mock

import pytest
import requests
from django.core import mail
from django.test import Client, override_settings

from notifications.sms import SMSError, send_sms
from notifications.tasks import send_member_notification, send_welcome_email

TWILIO = {
    "TWILIO_ACCOUNT_SID": "AC123",
    "TWILIO_AUTH_TOKEN": "secret",
    "TWILIO_FROM_NUMBER": "+15125550000",
}


@pytest.mark.django_db
def test_member_notification_is_queued():
    resp = Client().post(
        "/api/notifications/member/",
        {"name": "Katherine Johnson", "email": "kj@eatmeet.club"},
        content_type="application/json",
    )
    assert resp.status_code == 202
    assert resp.json()["success"] is True
    assert len(mail.outbox) == 1
    assert mail.outbox[0].subject == "Welcome to Eat Meet Club - Membership Confirmation"
    assert "Katherine Johnson" in mail.outbox[0].body


@pytest.mark.django_db
def test_member_notification_validation():
    resp = Client().post(
        "/api/notifications/member/",
        {"name": "K", "email": "kj@eatmeet.club"},
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "name: Name must be at least 2 characters"


@pytest.mark.django_db
def test_custom_email_is_admin_only(admin_api_client, auth_client):
    payload = {"to": "guest@eatmeet.club", "subject": "Menu update", "body": "Dessert changed."}
    assert auth_client.post("/api/notifications/custom-email/", payload,
                            content_type="application/json").status_code == 403

    resp = admin_api_client.post("/api/notifications/custom-email/", payload, content_type="application/json")
    assert resp.status_code == 202
    assert mail.outbox[-1].subject == "Menu update"
    assert mail.outbox[-1].to == ["guest@eatmeet.club"]


def test_sms_skipped_without_account():
    with mock.patch("notifications.sms.requests.post") as post:
        assert send_sms("+15125550101", "hi") is None
    post.assert_not_called()


@override_settings(**TWILIO)
def test_sms_posts_to_twilio():
    response = mock.Mock(status_code=201)
    response.json.return_value = {"sid": "SM1"}
    with mock.patch("notifications.sms.requests.post", return_value=response) as post:
        assert send_sms("+15125550101", "hi") == "SM1"
    url = post.call_args.args[0]
    assert url.endswith("/Accounts/AC123/Messages.json")
    assert post.call_args.kwargs["data"]["To"] == "+15125550101"


@override_settings(**TWILIO)
def test_sms_errors_raise():
    with mock.patch("notifications.sms.requests.post", side_effect=requests.ConnectionError("down")):
        with pytest.raises(SMSError):
            send_sms("+15125550101", "hi")


@override_settings(**TWILIO)
def test_member_notification_reports_each_channel():
    with mock.patch("notifications.tasks.send_sms", side_effect=SMSError("Twilio send failed (500)")):
        result = send_member_notification("kj@eatmeet.club", "Katherine", "+15125550101")
    assert result == {"email": True, "sms": False}


def test_welcome_email_failure_is_reported():
    with mock.patch("notifications.tasks.send_templated_email", side_effect=OSError("smtp down")):
        assert send_welcome_email("kj@eatmeet.club", "Katherine") is False
