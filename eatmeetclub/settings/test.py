"""
Test settings for the EatMeetClub backend.

Uses an in-memory SQLite database, local-memory cache and mail outbox,
and runs Celery tasks eagerly so `.delay()` executes inline.
"""
from .base import *  # noqa

DEBUG = False
SECRET_KEY = "test-secret-key"
APP_ENVIRONMENT = "development"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
}

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

STRIPE_SECRET_KEY = "sk_test_dummy"
STRIPE_PUBLISHABLE_KEY = "pk_test_dummy"
STRIPE_WEBHOOK_SECRET = "whsec_dummy"
TWILIO_ACCOUNT_SID = ""
FRONTEND_URL = "http://testserver-frontend"
FRONTEND_SET_PASSWORD_URL = f"{FRONTEND_URL}/set-password"

REST_FRAMEWORK = {  # noqa: F405
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_CLASSES": [],
}
MEDIA_ROOT = BASE_DIR / "test-media"  # noqa: F405
