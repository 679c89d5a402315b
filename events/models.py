"""
Models for the events app.

An `Event` is a dining event hosted at one restaurant and created by
one user.  Events are hidden until `published` and, when the creator
is not the restaurant owner, go through an approval step.  Attendees
pick dishes from the host's menu (`EventMenuSelection`) and promoters
share `AffiliateLink` codes whose clicks and conversions are tracked.
"""
import os
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.text import slugify

from restaurants.models import MenuItem, Restaurant


def event_cover_upload_to(instance, filename):
    name, ext = os.path.splitext(filename or "")
    base = slugify(name) or "cover"
    return f"event-covers/{base}-{uuid.uuid4().hex[:8]}{ext.lower()}"


class Event(models.Model):
    APPROVAL_PENDING = "pending"
    APPROVAL_APPROVED = "approved"
    APPROVAL_REJECTED = "rejected"
    APPROVAL_CHOICES = [
        (APPROVAL_PENDING, "Pending"),
        (APPROVAL_APPROVED, "Approved"),
        (APPROVAL_REJECTED, "Rejected"),
    ]

    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name="events")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="created_events",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    date = models.DateField(db_index=True)
    time = models.TimeField()
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    cover_image = models.ImageField(upload_to=event_cover_upload_to, blank=True, null=True)
    published = models.BooleanField(default=False, db_index=True)
    tickets_sold = models.PositiveIntegerField(default=0)

    approval_status = models.CharField(max_length=16, choices=APPROVAL_CHOICES, null=True, blank=True)
    submitted_for_approval_at = models.DateTimeField(null=True, blank=True)
    approval_date = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="approved_events",
    )
    rejection_date = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="rejected_events",
    )
    rejection_reason = models.TextField(blank=True)
    ambassador_fee_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "time"]
        indexes = [
            models.Index(fields=["published", "date"], name="events_even_publish_7c1d2a_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.date})"

    @property
    def tickets_remaining(self) -> int:
        return max(self.capacity - self.tickets_sold, 0)


class EventMenuSelection(models.Model):
    """A dish an attendee picked from the host restaurant's menu."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="menu_selections")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="menu_selections",
    )
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name="selections")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("event", "user", "menu_item")
        indexes = [
            models.Index(fields=["event", "user"], name="events_even_event_i_4b8e01_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.menu_item_id} @ {self.event_id}"


class AffiliateLink(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="affiliate_links")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="affiliate_links",
    )
    code = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("event", "user")
        ordering = ["-created_at"]

    def __str__(self):
        return self.code


class AffiliateTracking(models.Model):
    ACTION_CLICK = "click"
    ACTION_CONVERSION = "conversion"
    ACTION_CHOICES = [
        (ACTION_CLICK, "Click"),
        (ACTION_CONVERSION, "Conversion"),
    ]

    affiliate_link = models.ForeignKey(AffiliateLink, on_delete=models.CASCADE, related_name="tracking")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="affiliate_tracking")
    action_type = models.CharField(max_length=16, choices=ACTION_CHOICES, db_index=True)
    referred_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    ticket = models.ForeignKey(
        "payments.Ticket",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="affiliate_tracking",
    )
    conversion_value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    ip_address = models.CharField(max_length=64, blank=True)
    user_agent = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.action_type} via {self.affiliate_link_id}"
