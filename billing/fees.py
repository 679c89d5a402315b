"""
Platform fee configuration.

Values live in ``AdminConfig`` rows; a key with no row falls back to
its default.  Commission types are ``flat`` (an amount per ticket or
signup) or ``percentage`` (of the subtotal).
"""
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction

from .models import AdminConfig

logger = logging.getLogger(__name__)

FEE_FLAT = "flat"
FEE_PERCENTAGE = "percentage"
FEE_TYPES = (FEE_FLAT, FEE_PERCENTAGE)

DEFAULT_FEES = {
    "restaurant_monthly_fee": Decimal("50"),
    "signup_commission_value": Decimal("10"),
    "signup_commission_type": FEE_PERCENTAGE,
    "ticket_commission_value": Decimal("5"),
    "ticket_commission_type": FEE_PERCENTAGE,
}

TYPE_KEYS = {"signup_commission_type", "ticket_commission_type"}

CENTS = Decimal("0.01")


class FeeConfigError(ValueError):
    pass


def _parse(key, raw):
    if key in TYPE_KEYS:
        value = str(raw).strip().lower()
        if value not in FEE_TYPES:
            raise FeeConfigError(f"{key} must be one of: {', '.join(FEE_TYPES)}")
        return value
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise FeeConfigError(f"{key} must be a number")
    if not value.is_finite() or value < 0:
        raise FeeConfigError(f"{key} must be a number >= 0")
    return value


def get_fee_config() -> dict:
    config = dict(DEFAULT_FEES)
    for row in AdminConfig.objects.filter(key__in=DEFAULT_FEES.keys()):
        try:
            config[row.key] = _parse(row.key, row.value)
        except FeeConfigError:
            logger.warning("Ignoring invalid fee config %s=%r", row.key, row.value)
    return config


@transaction.atomic
def update_fee_config(values: dict) -> dict:
    """Validate then upsert each key; unknown keys are rejected before anything is written."""
    unknown = sorted(set(values) - set(DEFAULT_FEES))
    if unknown:
        raise FeeConfigError(f"Unknown fee setting: {', '.join(unknown)}")
    parsed = {key: _parse(key, raw) for key, raw in values.items()}
    for key, value in parsed.items():
        AdminConfig.objects.update_or_create(key=key, defaults={"value": str(value)})
        logger.info("Fee config %s set to %s", key, value)
    return get_fee_config()


def apply_commission(subtotal: Decimal, units: int, fee_type: str, value: Decimal) -> Decimal:
    if fee_type == FEE_FLAT:
        fee = value * units
    else:
        fee = subtotal * value / Decimal("100")
    return fee.quantize(CENTS, rounding=ROUND_HALF_UP)


def ticket_service_fee(subtotal: Decimal, quantity: int, config: dict | None = None) -> Decimal:
    config = config or get_fee_config()
    return apply_commission(
        Decimal(subtotal),
        quantity,
        config["ticket_commission_type"],
        config["ticket_commission_value"],
    )
