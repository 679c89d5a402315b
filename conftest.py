"""
Common test fixtures for Django REST Framework API tests.

Provides fixtures for creating members and an admin and for
authenticating test clients with JWT tokens.  Also provides a
restaurant, a menu item and a published event owned by ``user``, used
across the restaurants, events and payments tests.
"""
import datetime
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import Client

from events.models import Event
from restaurants.models import MenuItem, Restaurant
from users.models import UserProfile

PASSWORD = "pass12345"


def _make_user(email, full_name="", role=UserProfile.ROLE_USER):
    user = User.objects.create_user(username=email, email=email, password=PASSWORD)
    profile = user.profile
    profile.full_name = full_name
    profile.role = role
    profile.save()
    return user


def _jwt_client(email, client=None):
    """Return a test client carrying a Bearer token for ``email``."""
    client = client or Client()
    resp = client.post(
        "/api/auth/token/",
        {"email": email, "password": PASSWORD},
        content_type="application/json",
    )
    assert resp.status_code == 200, resp.content
    client.defaults["HTTP_AUTHORIZATION"] = f"Bearer {resp.json()['access']}"
    return client


@pytest.fixture(autouse=True)
def clear_cache():
    """Signup stashes and throttle counters live in the cache."""
    cache.clear()
    yield


@pytest.fixture
def user(db):
    """Create a test user."""
    return _make_user("u1@eatmeet.club", full_name="Ada Lovelace")


@pytest.fixture
def other_user(db):
    return _make_user("u2@eatmeet.club", full_name="Grace Hopper")


@pytest.fixture
def admin_user(db):
    """An admin by profile role, not Django staff."""
    return _make_user("admin@eatmeet.club", full_name="Site Admin", role=UserProfile.ROLE_ADMIN)


@pytest.fixture
def auth_client(client, db, user):
    """Authenticate the Django test client using JWT tokens."""
    return _jwt_client(user.email, client)


@pytest.fixture
def other_client(db, other_user):
    return _jwt_client(other_user.email)


@pytest.fixture
def admin_api_client(db, admin_user):
    return _jwt_client(admin_user.email)


@pytest.fixture
def restaurant(db, user):
    return Restaurant.objects.create(
        user=user,
        name="Chez Ada",
        description="Small plates",
        cuisine_type="French",
        address="12 Analytical Way",
        city="Austin",
        state="TX",
        zipcode="78701",
        phone="5125550100",
    )


@pytest.fixture
def menu_item(db, restaurant):
    return MenuItem.objects.create(restaurant=restaurant, name="Ratatouille", price=Decimal("18.00"))


@pytest.fixture
def event(db, user, restaurant):
    """A published event with 10 seats at $40."""
    return Event.objects.create(
        restaurant=restaurant,
        user=user,
        title="Supper Club Night",
        description="Five courses",
        date=datetime.date.today() + datetime.timedelta(days=14),
        time=datetime.time(19, 0),
        capacity=10,
        price=Decimal("40.00"),
        published=True,
    )


@pytest.fixture
def make_user(db):
    """Factory: ``make_user(email, full_name="", role="user")``."""
    return _make_user


@pytest.fixture
def client_for(db):
    """Factory: a fresh JWT-authenticated client for an existing user."""
    return lambda u: _jwt_client(u.email)
