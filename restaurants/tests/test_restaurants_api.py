"""
API tests for the restaurants app.

Covers restaurant CRUD and visibility of verification details, the
verification workflow, nested menu items with ingredients and media,
and contract signing.
"""
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client

from restaurants.models import MenuItem, Restaurant

RESTAURANT_PAYLOAD = {
    "name": "Casa Grace",
    "description": "Family style",
    "cuisine_type": "Mexican",
    "address": "99 Compiler Rd",
    "city": "Houston",
    "state": "TX",
    "zipcode": "77002",
    "phone": "713-555-0199",
}


@pytest.mark.django_db
def test_create_and_list_restaurants(auth_client, user):
    resp = auth_client.post("/api/restaurants/", RESTAURANT_PAYLOAD, content_type="application/json")
    assert resp.status_code == 201, resp.content
    body = resp.json()
    assert body["user_id"] == user.id
    assert body["phone"] == "7135550199"
    assert body["verification_status"] == "unverified"
    assert "ein_number" in body

    anon = Client()
    listing = anon.get("/api/restaurants/?city=hous")
    assert listing.status_code == 200
    results = listing.json()["results"]
    assert [r["name"] for r in results] == ["Casa Grace"]
    assert "ein_number" not in results[0]


@pytest.mark.django_db
def test_create_requires_authentication(client):
    resp = client.post("/api/restaurants/", RESTAURANT_PAYLOAD, content_type="application/json")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_only_owner_can_update(restaurant, other_client, auth_client):
    resp = other_client.patch(f"/api/restaurants/{restaurant.id}/", {"name": "Stolen"},
                              content_type="application/json")
    assert resp.status_code == 403

    resp = auth_client.patch(f"/api/restaurants/{restaurant.id}/", {"name": "Chez Ada II"},
                             content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Chez Ada II"


@pytest.mark.django_db
def test_mine_filter(restaurant, other_client, other_user):
    Restaurant.objects.create(
        user=other_user, name="Hopper House", cuisine_type="Diner", address="1 Navy Pier",
        city="Chicago", state="IL", zipcode="60611", phone="3125550100",
    )
    resp = other_client.get("/api/restaurants/?mine=1")
    assert [r["name"] for r in resp.json()["results"]] == ["Hopper House"]


@pytest.mark.django_db
def test_verification_workflow(restaurant, auth_client, admin_api_client):
    url = f"/api/restaurants/{restaurant.id}/verification/"
    bad = auth_client.post(
        url,
        {"ein_number": "12-3456789", "business_license_number": "BL-1", "owner_name": "Ada", "owner_ssn_last4": "12a4"},
        content_type="application/json",
    )
    assert bad.status_code == 400
    assert bad.json()["error"] == "owner_ssn_last4: Must be 4 digits"

    ok = auth_client.post(
        url,
        {"ein_number": "12-3456789", "business_license_number": "BL-1", "owner_name": "Ada", "owner_ssn_last4": "1234"},
        content_type="application/json",
    )
    assert ok.status_code == 200, ok.content
    assert ok.json()["verification_status"] == "pending"

    assert auth_client.post(f"/api/restaurants/{restaurant.id}/verify/").status_code == 403

    verified = admin_api_client.post(f"/api/restaurants/{restaurant.id}/verify/")
    assert verified.status_code == 200
    restaurant.refresh_from_db()
    assert restaurant.verification_status == Restaurant.STATUS_VERIFIED
    assert restaurant.verified_at is not None
    assert restaurant.is_verified


@pytest.mark.django_db
def test_admin_rejects_verification(restaurant, admin_api_client):
    restaurant.verification_status = Restaurant.STATUS_PENDING
    restaurant.save()
    resp = admin_api_client.post(
        f"/api/restaurants/{restaurant.id}/reject/", {"reason": "Blurry license"}, content_type="application/json"
    )
    assert resp.status_code == 200
    restaurant.refresh_from_db()
    assert restaurant.verification_status == Restaurant.STATUS_REJECTED


@pytest.mark.django_db
def test_verification_rejects_unsupported_document(restaurant, auth_client):
    upload = SimpleUploadedFile("license.gif", b"GIF89a" + b"\x00" * 10, content_type="image/gif")
    resp = auth_client.post(
        f"/api/restaurants/{restaurant.id}/verification/",
        {
            "ein_number": "12-3456789",
            "business_license_number": "BL-1",
            "owner_name": "Ada",
            "owner_ssn_last4": "1234",
            "drivers_license_image": upload,
        },
    )
    assert resp.status_code == 400
    assert "JPG, PNG or PDF" in resp.json()["error"]


@pytest.mark.django_db
def test_menu_items_with_ingredients(restaurant, auth_client, other_client):
    base = f"/api/restaurants/{restaurant.id}/menu-items/"
    resp = auth_client.post(
        base,
        {"name": "Coq au Vin", "price": "24.50", "ingredients": ["chicken", " wine ", ""]},
        content_type="application/json",
    )
    assert resp.status_code == 201, resp.content
    item_id = resp.json()["id"]
    assert resp.json()["ingredients"] == ["chicken", "wine"]

    resp = auth_client.patch(f"{base}{item_id}/", {"ingredients": ["mushrooms"]}, content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["ingredients"] == ["mushrooms"]

    denied = other_client.post(base, {"name": "Fake", "price": "1.00"}, content_type="application/json")
    assert denied.status_code == 403

    negative = auth_client.post(base, {"name": "Free Lunch", "price": "-1"}, content_type="application/json")
    assert negative.status_code == 400

    anon = Client()
    listing = anon.get(base)
    assert listing.status_code == 200
    assert [i["name"] for i in listing.json()] == ["Coq au Vin"]


@pytest.mark.django_db
def test_menu_items_for_missing_restaurant(auth_client):
    assert auth_client.get("/api/restaurants/9999/menu-items/").status_code == 404


@pytest.mark.django_db
def test_menu_item_media(restaurant, menu_item, auth_client):
    base = f"/api/restaurants/{restaurant.id}/menu-items/{menu_item.id}/media/"
    assert auth_client.post(base, {"media_type": "image"}, content_type="application/json").status_code == 400

    resp = auth_client.post(
        base, {"url": "https://cdn.eatmeet.club/ratatouille.jpg", "media_type": "image"},
        content_type="application/json",
    )
    assert resp.status_code == 201
    media_id = resp.json()["id"]
    assert resp.json()["media_url"] == "https://cdn.eatmeet.club/ratatouille.jpg"

    assert auth_client.delete(f"{base}{media_id}/").status_code == 204
    assert MenuItem.objects.get(pk=menu_item.id).media.count() == 0


@pytest.mark.django_db
def test_sign_contract(restaurant, auth_client, other_client):
    url = f"/api/restaurants/{restaurant.id}/contracts/"
    assert other_client.post(url, {}, content_type="application/json").status_code == 403

    resp = auth_client.post(url, {"terms_version": "2.0"}, content_type="application/json", REMOTE_ADDR="10.0.0.7")
    assert resp.status_code == 201, resp.content
    assert resp.json()["ip_address"] == "10.0.0.7"
    restaurant.refresh_from_db()
    assert restaurant.has_signed_contract

    listing = auth_client.get(url)
    assert [c["terms_version"] for c in listing.json()] == ["2.0"]
