"""
Tests for feature flag management and resolution.
"""
from unittest import mock

import pytest
from django.db import DatabaseError
from django.test import Client, override_settings

from featureflags import services
from featureflags.models import FeatureFlag, FeatureFlagValue

BASE = "/api/admin/feature-flags/"


@pytest.fixture
def flag(db):
    return services.create_flag("memories", "Memories", "Meal memories page")


@pytest.mark.django_db
def test_create_flag_seeds_every_environment(admin_api_client):
    resp = admin_api_client.post(
        BASE,
        {"feature_key": "affiliate-links", "display_name": "Affiliate links"},
        content_type="application/json",
    )
    assert resp.status_code == 201, resp.content
    body = resp.json()
    assert sorted(v["environment"] for v in body["values"]) == ["development", "production", "staging"]
    assert not any(v["is_enabled"] for v in body["values"])


@pytest.mark.django_db
def test_flag_admin_is_restricted(auth_client):
    assert auth_client.get(BASE).status_code == 403
    assert Client().get(BASE).status_code == 401


@pytest.mark.django_db
def test_toggle_and_resolve_for_environment(admin_api_client, flag):
    resp = admin_api_client.post(
        f"{BASE}{flag.id}/toggle/",
        {"environment": "development", "is_enabled": True},
        content_type="application/json",
    )
    assert resp.status_code == 200
    assert resp.json()["is_enabled"] is True

    # Test settings run as "development"
    resolved = Client().get("/api/feature-flags/").json()
    assert resolved == {"environment": "development", "flags": {"memories": True}, "fallback": False}

    with override_settings(APP_ENVIRONMENT="production"):
        assert services.is_enabled("memories") is False
    assert services.is_enabled("unknown-key") is False


@pytest.mark.django_db
def test_user_targeting_overrides_environment(admin_api_client, user, other_user, flag):
    url = f"{BASE}{flag.id}/targets/"
    resp = admin_api_client.post(url, {"user_id": user.id}, content_type="application/json")
    assert resp.status_code == 201
    assert resp.json()["email"] == user.email
    assert resp.json()["is_enabled"] is True

    assert services.is_enabled("memories", user) is True
    assert services.is_enabled("memories", other_user) is False

    # Targeting the same user again updates the row
    admin_api_client.post(url, {"user_id": user.id, "is_enabled": False}, content_type="application/json")
    assert flag.targets.count() == 1
    assert services.is_enabled("memories", user) is False

    assert admin_api_client.delete(f"{url}{user.id}/").status_code == 204
    assert admin_api_client.delete(f"{url}{user.id}/").status_code == 404
    assert admin_api_client.post(url, {"user_id": 999999}, content_type="application/json").status_code == 404


@pytest.mark.django_db
def test_resolved_flags_for_signed_in_member(auth_client, user, flag):
    services.set_targeting(flag, user, True)
    resp = auth_client.get("/api/feature-flags/")
    assert resp.json()["flags"] == {"memories": True}


@pytest.mark.django_db
def test_user_search(admin_api_client, user, other_user):
    assert admin_api_client.get(f"{BASE}user-search/?q=u1").json() == []
    resp = admin_api_client.get(f"{BASE}user-search/?q=eatmeet")
    emails = [row["email"] for row in resp.json()]
    assert emails == sorted(emails)
    assert {"u1@eatmeet.club", "u2@eatmeet.club"} <= set(emails)


@pytest.mark.django_db
def test_flags_fail_open_when_database_is_unavailable(flag):
    with mock.patch.object(FeatureFlag.objects, "values_list", side_effect=DatabaseError("down")):
        flag_set = services.flags_for()
    assert flag_set.fallback is True
    assert flag_set.is_enabled("memories") is True
    assert flag_set.is_enabled("anything") is True


@pytest.mark.django_db
def test_flags_memoized_per_request(rf, flag):
    request = rf.get("/")
    request.user = mock.Mock(is_authenticated=False)
    first = services.flags_for_request(request)
    FeatureFlagValue.objects.filter(flag=flag).update(is_enabled=True)
    assert services.flags_for_request(request) is first
    assert first.is_enabled("memories") is False
