"""
Models for the contracts app.

A `ContractTemplate` is the agreement text shown to restaurants,
referral partners and ticket sellers.  Its ``content`` may contain
``{{variable.name}}`` placeholders filled in by
``contracts.services.render_content``.
"""
from django.conf import settings
from django.db import models


class ContractTemplate(models.Model):
    TYPE_RESTAURANT = "restaurant"
    TYPE_RESTAURANT_REFERRAL = "restaurant_referral"
    TYPE_TICKET_SALES = "ticket_sales"
    TYPE_CHOICES = [
        (TYPE_RESTAURANT, "Restaurant"),
        (TYPE_RESTAURANT_REFERRAL, "Restaurant referral"),
        (TYPE_TICKET_SALES, "Ticket sales"),
    ]

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    content = models.TextField()
    type = models.CharField(max_length=32, choices=TYPE_CHOICES, db_index=True)
    variables = models.JSONField(default=list, blank=True)
    version = models.CharField(max_length=32, default="1.0")
    is_active = models.BooleanField(default=True)
    storage_path = models.CharField(max_length=500, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]

    def __str__(self) -> str:
        return f"{self.name} v{self.version} ({self.type})"
