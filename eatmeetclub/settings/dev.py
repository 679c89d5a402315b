"""
Development settings for the EatMeetClub backend.

Extends the base settings by enabling debugging and allowing all hosts.  Do
not use these settings in production.
"""
from .base import *  # noqa

DEBUG = True
ALLOWED_HOSTS = ["*", "127.0.0.1", "localhost"]
CSRF_TRUSTED_ORIGINS = ["http://127.0.0.1:8000", "http://localhost:8000", "http://localhost:5173"]
CORS_ALLOWED_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

LOGGING["loggers"] = {  # noqa: F405
    "payments": {"handlers": ["console"], "level": "DEBUG", "propagate": False},
    "memberships": {"handlers": ["console"], "level": "DEBUG", "propagate": False},
}
