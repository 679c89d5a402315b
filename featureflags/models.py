"""
Models for the featureflags app.

A `FeatureFlag` has one `FeatureFlagValue` per deployment environment
and any number of `UserFeatureTargeting` rows that override the
environment value for a single user.
"""
from django.conf import settings
from django.db import models


class FeatureFlag(models.Model):
    feature_key = models.SlugField(max_length=100, unique=True)
    display_name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["feature_key"]

    def __str__(self) -> str:
        return self.feature_key


class FeatureFlagValue(models.Model):
    ENV_DEVELOPMENT = "development"
    ENV_STAGING = "staging"
    ENV_PRODUCTION = "production"
    ENVIRONMENT_CHOICES = [
        (ENV_DEVELOPMENT, "Development"),
        (ENV_STAGING, "Staging"),
        (ENV_PRODUCTION, "Production"),
    ]

    flag = models.ForeignKey(FeatureFlag, on_delete=models.CASCADE, related_name="values")
    environment = models.CharField(max_length=16, choices=ENVIRONMENT_CHOICES)
    is_enabled = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["flag", "environment"], name="uniq_flag_environment"),
        ]
        ordering = ["flag_id", "environment"]

    def __str__(self) -> str:
        return f"{self.flag_id}@{self.environment}={self.is_enabled}"


class UserFeatureTargeting(models.Model):
    flag = models.ForeignKey(FeatureFlag, on_delete=models.CASCADE, related_name="targets")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="feature_targets",
    )
    is_enabled = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["flag", "user"], name="uniq_flag_user_target"),
        ]

    def __str__(self) -> str:
        return f"{self.flag_id} for {self.user_id}={self.is_enabled}"
