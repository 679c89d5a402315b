"""
Contract template helpers.

``render_content`` substitutes ``{{variable.name}}`` placeholders.
Values may be passed flat (``{"restaurant.name": "Chez Nous"}``) or
nested (``{"restaurant": {"name": "Chez Nous"}}``); placeholders with no
value are left as written so admins can spot them in previews.
"""
import re

from django.utils import timezone

PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z0-9_.]+)\s*\}\}")

DEFAULT_AVAILABLE_FIELDS = [
    {"id": "restaurant.name", "name": "restaurant.name", "label": "Restaurant Name", "type": "text"},
    {"id": "restaurant.address", "name": "restaurant.address", "label": "Restaurant Address", "type": "text"},
    {"id": "restaurant.city", "name": "restaurant.city", "label": "Restaurant City", "type": "text"},
    {"id": "restaurant.state", "name": "restaurant.state", "label": "Restaurant State", "type": "text"},
    {"id": "restaurant.zipcode", "name": "restaurant.zipcode", "label": "Restaurant Zip", "type": "text"},
    {"id": "restaurant.phone", "name": "restaurant.phone", "label": "Restaurant Phone", "type": "text"},
    {"id": "user.fullName", "name": "user.fullName", "label": "User Full Name", "type": "text"},
    {"id": "user.email", "name": "user.email", "label": "User Email", "type": "email"},
    {"id": "contract.date", "name": "contract.date", "label": "Contract Date", "type": "date"},
    {"id": "contract.term", "name": "contract.term", "label": "Contract Term", "type": "number"},
    {"id": "payment.amount", "name": "payment.amount", "label": "Payment Amount", "type": "currency"},
    {"id": "payment.date", "name": "payment.date", "label": "Payment Date", "type": "date"},
]


def default_storage_path(template_type: str) -> str:
    return f"templates/{template_type}/{int(timezone.now().timestamp() * 1000)}"


def _lookup(values: dict, name: str):
    if name in values:
        return values[name]
    current = values
    for part in name.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def render_content(content: str, values: dict) -> str:
    def replace(match):
        value = _lookup(values, match.group(1))
        if value is None or isinstance(value, dict):
            return match.group(0)
        return str(value)

    return PLACEHOLDER_RE.sub(replace, content or "")


def placeholders(content: str) -> list:
    """Distinct placeholder names in order of first use."""
    seen = []
    for name in PLACEHOLDER_RE.findall(content or ""):
        if name not in seen:
            seen.append(name)
    return seen


def restaurant_values(restaurant, user=None) -> dict:
    """Values for the restaurant.*, user.* and contract.date fields."""
    user = user or restaurant.user
    profile = getattr(user, "profile", None)
    return {
        "restaurant": {
            "name": restaurant.name,
            "address": restaurant.address,
            "city": restaurant.city,
            "state": restaurant.state,
            "zipcode": restaurant.zipcode,
            "phone": restaurant.phone,
        },
        "user": {
            "fullName": profile.display_name if profile else user.email,
            "email": user.email,
        },
        "contract": {"date": timezone.localdate().isoformat()},
    }
