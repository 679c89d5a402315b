"""
API tests for meal memories.
"""
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, override_settings

from memories.models import Memory, MemoryContent


def _create(client, **overrides):
    payload = {
        "title": "Birthday supper",
        "location": "Chez Ada, Austin",
        "date": "2024-05-04",
        "privacy": "private",
        "dish_names": ["Ratatouille", " ", "Tarte Tatin"],
    }
    payload.update(overrides)
    return client.post("/api/memories/", payload, content_type="application/json")


@pytest.mark.django_db
def test_create_memory_with_dishes(auth_client, user, event, restaurant):
    resp = _create(auth_client, event_id=event.id, restaurant_id=restaurant.id)
    assert resp.status_code == 201, resp.content
    body = resp.json()
    assert body["user_id"] == user.id
    assert body["event_id"] == event.id
    assert [d["dish_name"] for d in body["dishes"]] == ["Ratatouille", "Tarte Tatin"]

    resp = auth_client.patch(
        f"/api/memories/{body['id']}/", {"dish_names": ["Onion Soup"]}, content_type="application/json"
    )
    assert resp.status_code == 200
    assert [d["dish_name"] for d in resp.json()["dishes"]] == ["Onion Soup"]


@pytest.mark.django_db
def test_memory_requires_title_and_login(auth_client):
    resp = _create(auth_client, title="   ")
    assert resp.status_code == 400
    assert resp.json()["error"] == "title: Title is required"
    assert _create(Client()).status_code == 401


@pytest.mark.django_db
def test_privacy_controls_visibility(auth_client, other_client):
    private_id = _create(auth_client, title="Private dinner").json()["id"]
    public_id = _create(auth_client, title="Open table", privacy="public").json()["id"]
    unlisted_id = _create(auth_client, title="Friends only", privacy="unlisted").json()["id"]

    others_view = {m["id"] for m in other_client.get("/api/memories/").json()["results"]}
    assert others_view == {public_id}
    assert other_client.get(f"/api/memories/{unlisted_id}/").status_code == 200
    assert other_client.get(f"/api/memories/{private_id}/").status_code == 404

    mine = {m["id"] for m in auth_client.get("/api/memories/?mine=1").json()["results"]}
    assert mine == {private_id, public_id, unlisted_id}
    assert Client().get("/api/memories/?mine=1").json()["results"] == []


@pytest.mark.django_db
def test_only_owner_edits(other_client, auth_client):
    memory_id = _create(auth_client, privacy="public").json()["id"]
    resp = other_client.patch(f"/api/memories/{memory_id}/", {"title": "Mine now"}, content_type="application/json")
    assert resp.status_code == 403
    resp = other_client.post(f"/api/memories/{memory_id}/dishes/", {"dish_name": "Soup"},
                             content_type="application/json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_notes_and_photo_links(auth_client):
    memory_id = _create(auth_client).json()["id"]
    url = f"/api/memories/{memory_id}/content/"

    resp = auth_client.post(url, {"content_type": "note", "content_text": "  "}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "A note cannot be empty"

    resp = auth_client.post(url, {"content_type": "photo"}, content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "A photo needs a file or a URL"

    resp = auth_client.post(
        url, {"content_type": "photo", "content_url": "https://img.eatmeet.club/p/1.jpg"},
        content_type="application/json",
    )
    assert resp.status_code == 201
    assert resp.json()["url"] == "https://img.eatmeet.club/p/1.jpg"
    content_id = resp.json()["id"]

    assert auth_client.delete(f"{url}{content_id}/").status_code == 204
    assert not MemoryContent.objects.filter(pk=content_id).exists()


@pytest.mark.django_db
def test_photo_upload(auth_client, tmp_path):
    memory_id = _create(auth_client).json()["id"]
    photo = SimpleUploadedFile("plate.jpg", b"\xff\xd8\xff\xe0fakejpeg", content_type="image/jpeg")
    with override_settings(MEDIA_ROOT=tmp_path):
        resp = auth_client.post(f"/api/memories/{memory_id}/content/", {"content_type": "photo", "file": photo})
    assert resp.status_code == 201, resp.content
    assert resp.json()["url"].startswith(f"/media/memories/{memory_id}/")
    assert resp.json()["url"].endswith(".jpg")


@pytest.mark.django_db
def test_dishes_and_attendees(auth_client, other_user):
    memory_id = _create(auth_client, dish_names=[]).json()["id"]

    resp = auth_client.post(f"/api/memories/{memory_id}/dishes/", {"dish_name": "Crème brûlée"},
                            content_type="application/json")
    assert resp.status_code == 201
    dish_id = resp.json()["id"]
    assert auth_client.delete(f"/api/memories/{memory_id}/dishes/{dish_id}/").status_code == 204

    url = f"/api/memories/{memory_id}/attendees/"
    resp = auth_client.post(url, {"user_id": other_user.id}, content_type="application/json")
    assert resp.status_code == 201
    assert resp.json()["email"] == other_user.email
    assert resp.json()["is_tagged"] is False

    resp = auth_client.post(url, {"user_id": other_user.id, "is_tagged": True}, content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["is_tagged"] is True

    assert auth_client.post(url, {"user_id": 999999}, content_type="application/json").status_code == 404
    assert auth_client.delete(f"{url}{other_user.id}/").status_code == 204
    assert Memory.objects.get(pk=memory_id).attendees.count() == 0
