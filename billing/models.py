"""
Models for the billing app.

`BillingRecord` is the ledger the back-office reports on: one row per
successful ticket or membership payment.  `AdminConfig` holds the
platform fee settings as string key/value pairs.
"""
from django.conf import settings
from django.db import models


class BillingRecord(models.Model):
    KIND_MEMBERSHIP = "membership"
    KIND_TICKET = "ticket"
    KIND_CHOICES = [
        (KIND_MEMBERSHIP, "Membership"),
        (KIND_TICKET, "Ticket"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="billing_records",
    )
    email = models.EmailField(db_index=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    kind = models.CharField(max_length=16, choices=KIND_CHOICES)
    paid_at = models.DateTimeField(db_index=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    receipt_url = models.URLField(max_length=500, blank=True)
    payment_id = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-paid_at"]

    def __str__(self) -> str:
        return f"{self.email} {self.amount} ({self.kind})"


class AdminConfig(models.Model):
    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=255)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:
        return f"{self.key}={self.value}"
