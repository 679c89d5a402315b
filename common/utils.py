"""Request helpers shared across apps."""


def client_ip(request):
    """First address in ``X-Forwarded-For``, else ``REMOTE_ADDR``."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR") or None
