"""
Project-wide DRF exception handler.

DRF's default payload is kept as-is; an ``error`` key is added with a
single human-readable message so clients can surface it directly in a
toast or alert banner.
"""
import logging

from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _first_message(detail):
    if isinstance(detail, dict):
        if "detail" in detail:
            return _first_message(detail["detail"])
        for key, value in detail.items():
            msg = _first_message(value)
            if msg:
                return msg if key == "non_field_errors" else f"{key}: {msg}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None
    data = response.data
    if isinstance(data, dict) and "error" not in data:
        data["error"] = _first_message(data)
    elif isinstance(data, list):
        response.data = {"detail": data, "error": _first_message(data)}
    if response.status_code >= 500:
        logger.error("API error in %s: %s", context.get("view").__class__.__name__, exc)
    return response
