"""
Tests for contract templates and placeholder rendering.
"""
import pytest
from django.test import Client

from contracts import services
from contracts.models import ContractTemplate

BASE = "/api/admin/contract-templates/"

CONTENT = (
    "This agreement is made on {{contract.date}} between Eat Meet Club and "
    "{{ restaurant.name }} of {{restaurant.city}}, represented by {{user.fullName}}. "
    "Term: {{contract.term}} months."
)


@pytest.fixture
def template(admin_user):
    return ContractTemplate.objects.create(
        name="Restaurant Partner Agreement",
        content=CONTENT,
        type=ContractTemplate.TYPE_RESTAURANT,
        created_by=admin_user,
        updated_by=admin_user,
    )


def test_render_content_flat_and_nested_values():
    content = "{{restaurant.name}} / {{ user.email }} / {{payment.amount}}"
    rendered = services.render_content(
        content, {"restaurant": {"name": "Chez Ada"}, "user.email": "u1@eatmeet.club"}
    )
    assert rendered == "Chez Ada / u1@eatmeet.club / {{payment.amount}}"
    assert services.placeholders(rendered) == ["payment.amount"]


def test_placeholders_are_distinct_in_order():
    assert services.placeholders("{{a}} {{b.c}} {{ a }}") == ["a", "b.c"]


@pytest.mark.django_db
def test_admin_creates_template_with_defaults(admin_api_client, admin_user):
    resp = admin_api_client.post(
        BASE,
        {"name": "  Referral Terms ", "content": "Hello {{user.fullName}}", "type": "restaurant_referral"},
        content_type="application/json",
    )
    assert resp.status_code == 201, resp.content
    body = resp.json()
    assert body["name"] == "Referral Terms"
    assert body["variables"] == []
    assert body["version"] == "1.0"
    assert body["storage_path"].startswith("templates/restaurant_referral/")
    assert body["created_by"] == admin_user.id

    resp = admin_api_client.post(
        BASE,
        {"name": "Bad", "content": "x", "type": "restaurant", "variables": {"a": 1}},
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "variables: Variables must be a list"


@pytest.mark.django_db
def test_templates_are_admin_only(auth_client, template):
    assert auth_client.get(BASE).status_code == 403
    assert auth_client.post(f"{BASE}{template.id}/deactivate/").status_code == 403


@pytest.mark.django_db
def test_filter_and_toggle_active(admin_api_client, template):
    resp = admin_api_client.post(f"{BASE}{template.id}/deactivate/")
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False
    assert admin_api_client.get(f"{BASE}?active=1").json()["results"] == []
    assert len(admin_api_client.get(f"{BASE}?type=restaurant").json()["results"]) == 1

    assert admin_api_client.post(f"{BASE}{template.id}/activate/").json()["is_active"] is True


@pytest.mark.django_db
def test_available_fields(admin_api_client):
    fields = admin_api_client.get(f"{BASE}available-fields/").json()
    assert len(fields) == 12
    assert {"id": "restaurant.name", "name": "restaurant.name", "label": "Restaurant Name", "type": "text"} in fields


@pytest.mark.django_db
def test_render_preview_reports_missing_fields(admin_api_client, template, restaurant):
    resp = admin_api_client.post(
        f"{BASE}{template.id}/render/",
        {"restaurant_id": restaurant.id, "values": {"contract.term": 12}},
        content_type="application/json",
    )
    assert resp.status_code == 200
    body = resp.json()
    assert "Chez Ada of Austin" in body["content"]
    assert "represented by Ada Lovelace" in body["content"]
    assert "Term: 12 months." in body["content"]
    assert body["missing"] == []


@pytest.mark.django_db
def test_owner_reads_active_template_rendered(auth_client, other_client, template, restaurant):
    url = f"{BASE}active/?type=restaurant&restaurant_id={restaurant.id}"
    resp = auth_client.get(url)
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Restaurant Partner Agreement"
    assert "Chez Ada" in body["content"]
    assert "{{contract.term}}" in body["content"]

    resp = other_client.get(url)
    assert resp.status_code == 403
    assert resp.json()["error"] == "You do not own this restaurant."

    assert Client().get(url).status_code == 401
    resp = auth_client.get(f"{BASE}active/?type=ticket_sales")
    assert resp.status_code == 404
    assert resp.json()["error"] == "No active contract template"
