"""
Models for the memberships app.

A `Membership` is a member's monthly subscription (or a one-off paid
month).  Each successful payment against it is stored as a
`MembershipPayment`; the billing ledger gets a matching
``BillingRecord``.  `Product` describes what is sold at checkout.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone


class Product(models.Model):
    INTERVAL_MONTH = "month"
    INTERVAL_YEAR = "year"
    INTERVAL_CHOICES = [
        (INTERVAL_MONTH, "Monthly"),
        (INTERVAL_YEAR, "Yearly"),
    ]

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price_cents = models.PositiveIntegerField()
    interval = models.CharField(max_length=10, choices=INTERVAL_CHOICES, default=INTERVAL_MONTH)
    stripe_product_id = models.CharField(max_length=255, blank=True)
    stripe_price_id = models.CharField(max_length=255, blank=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["price_cents"]

    def __str__(self) -> str:
        return f"{self.name} ({self.price_cents / 100:.2f}/{self.interval})"


class Membership(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_EXPIRED = "expired"
    STATUS_CANCELED = "canceled"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_EXPIRED, "Expired"),
        (STATUS_CANCELED, "Canceled"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="memberships",
    )
    product = models.ForeignKey(
        Product,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="memberships",
    )
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    is_subscription = models.BooleanField(default=True)
    started_at = models.DateTimeField(default=timezone.now)
    renewal_at = models.DateTimeField(null=True, blank=True, db_index=True)
    subscription_id = models.CharField(max_length=255, blank=True)
    last_payment_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Membership {self.id} for {self.user_id} ({self.status})"

    @property
    def is_active(self) -> bool:
        """Active status and either open-ended or renewing in the future."""
        if self.status != self.STATUS_ACTIVE:
            return False
        return self.renewal_at is None or self.renewal_at > timezone.now()


class MembershipPayment(models.Model):
    membership = models.ForeignKey(Membership, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_id = models.CharField(max_length=255, unique=True, help_text="Stripe Checkout Session identifier")
    payment_method = models.CharField(max_length=32, default="card")
    payment_status = models.CharField(max_length=32, default="succeeded")
    receipt_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.payment_id} {self.amount}"
