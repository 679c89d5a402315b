"""
Account helpers shared by the users and memberships apps.

Membership checkout can be completed by a visitor without an account;
``get_or_create_member`` then creates one with an unusable password and
``needs_password`` set, and the welcome email carries a link built by
``password_setup_link``.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import PasswordResetTokenGenerator
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

User = get_user_model()
logger = logging.getLogger(__name__)


def password_setup_link(user) -> str:
    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = PasswordResetTokenGenerator().make_token(user)
    return f"{settings.FRONTEND_SET_PASSWORD_URL}?uid={uid}&token={token}"


def find_user_by_email(email: str):
    if not email:
        return None
    return User.objects.filter(email__iexact=email.strip()).first()


def get_or_create_member(email: str, name: str = "", phone: str = "", address: str = ""):
    """Return ``(user, created)`` for the checkout email."""
    user = find_user_by_email(email)
    if user is not None:
        return user, False

    email = email.strip().lower()
    user = User(username=email, email=email)
    user.set_unusable_password()
    user.save()

    # Created and cached on the instance by the post_save signal
    profile = user.profile
    profile.full_name = name or ""
    profile.phone = phone or ""
    profile.address = address or ""
    profile.needs_password = True
    profile.save()
    logger.info("Created member account for %s during checkout", email)
    return user, True
