"""
Database models for the payments app.

A `Ticket` is one purchase of one or more seats at an event.  It is
created ``pending`` when the Stripe Checkout Session is opened (its
``payment_id`` is the session id) and flipped to ``completed`` once the
payment is verified, either by the buyer returning to the site or by
the Stripe webhook.
"""
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from events.models import AffiliateLink, Event


class Ticket(models.Model):
    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="tickets",
    )
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2, help_text="Unit price at purchase time")
    service_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Stripe Checkout Session identifier",
    )
    payment_status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    purchase_date = models.DateTimeField(null=True, blank=True)
    sold_by = models.ForeignKey(
        AffiliateLink,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="tickets",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["event", "user", "payment_status"], name="payments_ti_event_i_9a3f51_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Ticket {self.id} x{self.quantity} ({self.get_payment_status_display()})"

    @property
    def subtotal(self):
        return self.price * self.quantity
