from django.conf import settings
from django.http import JsonResponse
from django.shortcuts import redirect


def index(request):
    # The SPA lives on its own origin; the API root only bounces there.
    return redirect(settings.FRONTEND_URL)


def health(request):
    return JsonResponse({"ok": True, "environment": settings.APP_ENVIRONMENT})
