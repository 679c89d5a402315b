# users/validators.py
from __future__ import annotations

import re
from django.core.exceptions import ValidationError
from django.conf import settings
from django.contrib.auth import get_user_model

from email_validator import validate_email as ev_validate_email, EmailNotValidError

User = get_user_model()

# Simple phone-like detector (8–15 digits, optional +)
PHONE_LIKE_RE = re.compile(r"^\+?\d{8,15}$")
PHONE_CHARS_RE = re.compile(r"[\s\-().]")


def validate_email_smart(value: str) -> str:
    """
    Validate & normalize an email using the 'email-validator' library.

    Returns the normalized email string.  DNS deliverability is only
    checked when ``STRICT_EMAIL_DNS`` is enabled in settings.
    """
    v = (value or "").strip()
    check_deliverability = bool(getattr(settings, "STRICT_EMAIL_DNS", False))
    try:
        info = ev_validate_email(v, check_deliverability=check_deliverability)
        return info.normalized
    except EmailNotValidError as e:
        raise ValidationError(str(e))


def validate_unique_email(value: str, instance=None) -> str:
    """Normalize, then enforce case-insensitive uniqueness."""
    v = validate_email_smart(value).lower()
    if PHONE_LIKE_RE.match(v):
        raise ValidationError("Please enter a valid email address, not a phone number.")

    qs = User.objects.filter(email__iexact=v)
    if instance is not None:
        qs = qs.exclude(pk=getattr(instance, "pk", None))
    if qs.exists():
        raise ValidationError("A user with this email already exists.")
    return v


def validate_phone(value: str, min_digits: int = 10) -> str:
    """Accepts the usual separators; requires at least ``min_digits`` digits."""
    v = (value or "").strip()
    if not v:
        return v
    compact = PHONE_CHARS_RE.sub("", v)
    digits = compact[1:] if compact.startswith("+") else compact
    if not digits.isdigit() or len(digits) < min_digits:
        raise ValidationError("Please enter a valid phone number")
    return compact
