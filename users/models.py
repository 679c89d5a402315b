"""
Models for the users app.

A `UserProfile` model extends the built-in `auth.User` with the contact
details collected by the signup and membership forms and the user's
role.  The profile is created automatically via signals when a new user
instance is saved.
"""
from django.contrib.auth.models import User
from django.db import models


class UserProfile(models.Model):
    """Extension of Django's built-in User model."""

    ROLE_USER = "user"
    ROLE_ADMIN = "admin"
    ROLE_CHOICES = [
        (ROLE_USER, "User"),
        (ROLE_ADMIN, "Admin"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=500, blank=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_USER, db_index=True)
    # Accounts created during membership checkout have no usable password yet.
    needs_password = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Profile<{self.user.email or self.user.username}>"

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        email = self.user.email or ""
        return email.split("@")[0] if email else self.user.username
