"""
Feature flag resolution and admin helpers.

A flag resolves to its value for the deployment environment
(``settings.APP_ENVIRONMENT``), then to the caller's own targeting row
if one exists.  Unknown keys resolve to disabled.  When the flags
cannot be loaded at all, every key resolves to enabled so a database
outage does not hide features from members.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction

from .models import FeatureFlag, FeatureFlagValue, UserFeatureTargeting

logger = logging.getLogger(__name__)

User = get_user_model()

ENVIRONMENTS = [value for value, _ in FeatureFlagValue.ENVIRONMENT_CHOICES]
USER_SEARCH_MIN_CHARS = 3
USER_SEARCH_LIMIT = 5


def current_environment() -> str:
    env = getattr(settings, "APP_ENVIRONMENT", FeatureFlagValue.ENV_PRODUCTION)
    return env if env in ENVIRONMENTS else FeatureFlagValue.ENV_PRODUCTION


class FlagSet:
    """Resolved flags for one caller."""

    def __init__(self, flags: dict, environment: str, fallback: bool = False):
        self.flags = flags
        self.environment = environment
        self.fallback = fallback

    def is_enabled(self, key: str) -> bool:
        return self.flags.get(key, self.fallback)

    def as_dict(self) -> dict:
        return dict(self.flags)


def flags_for(user=None, environment: str = None) -> FlagSet:
    environment = environment or current_environment()
    try:
        flags = dict.fromkeys(FeatureFlag.objects.values_list("feature_key", flat=True), False)
        values = FeatureFlagValue.objects.filter(environment=environment).values_list(
            "flag__feature_key", "is_enabled"
        )
        flags.update(values)
        if user is not None and user.is_authenticated:
            overrides = UserFeatureTargeting.objects.filter(user=user).values_list("flag__feature_key", "is_enabled")
            flags.update(overrides)
    except DatabaseError as e:
        logger.error("Failed to load feature flags for %s: %s", environment, e)
        return FlagSet({}, environment, fallback=True)
    return FlagSet(flags, environment)


def flags_for_request(request) -> FlagSet:
    """Resolve once per request and memoize on the request object."""
    flag_set = getattr(request, "_feature_flags", None)
    if flag_set is None:
        flag_set = flags_for(getattr(request, "user", None))
        request._feature_flags = flag_set
    return flag_set


def is_enabled(key: str, user=None) -> bool:
    return flags_for(user).is_enabled(key)


@transaction.atomic
def create_flag(feature_key: str, display_name: str, description: str = "") -> FeatureFlag:
    flag = FeatureFlag.objects.create(
        feature_key=feature_key,
        display_name=display_name,
        description=description or "",
    )
    FeatureFlagValue.objects.bulk_create(
        [FeatureFlagValue(flag=flag, environment=env, is_enabled=False) for env in ENVIRONMENTS]
    )
    logger.info("Feature flag %s created", feature_key)
    return flag


def set_value(flag: FeatureFlag, environment: str, is_enabled: bool) -> FeatureFlagValue:
    value, _ = FeatureFlagValue.objects.update_or_create(
        flag=flag,
        environment=environment,
        defaults={"is_enabled": is_enabled},
    )
    logger.info("Feature flag %s set to %s in %s", flag.feature_key, is_enabled, environment)
    return value


def set_targeting(flag: FeatureFlag, user, is_enabled: bool) -> UserFeatureTargeting:
    target, _ = UserFeatureTargeting.objects.update_or_create(
        flag=flag,
        user=user,
        defaults={"is_enabled": is_enabled},
    )
    return target


def remove_targeting(flag: FeatureFlag, user_id: int) -> bool:
    deleted, _ = UserFeatureTargeting.objects.filter(flag=flag, user_id=user_id).delete()
    return bool(deleted)


def search_users(query: str):
    query = (query or "").strip()
    if len(query) < USER_SEARCH_MIN_CHARS:
        return User.objects.none()
    return User.objects.filter(email__icontains=query).order_by("email")[:USER_SEARCH_LIMIT]
