"""
ASGI entry point for the EatMeetClub backend.

The default settings module is the development configuration; set
``DJANGO_SETTINGS_MODULE`` to ``eatmeetclub.settings.prod`` in deployment.
"""

import os

from django.conf import settings
from django.core.asgi import get_asgi_application
from django.contrib.staticfiles.handlers import ASGIStaticFilesHandler

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "eatmeetclub.settings.dev")

application = get_asgi_application()

# Serve /static/ when running under uvicorn in DEBUG mode
if settings.DEBUG:
    application = ASGIStaticFilesHandler(application)
