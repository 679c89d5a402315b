"""
Models for the restaurants app.

A `Restaurant` belongs to the user who listed it.  Before it can host
events it goes through verification (business identifiers plus the
owner's details) and signs the platform contract.  Each restaurant
publishes a menu of `MenuItem` rows with ingredients and photos.
"""
import os
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from django.utils.text import slugify


def _upload_path(prefix, instance, filename):
    name, ext = os.path.splitext(filename or "")
    base = slugify(name) or "file"
    return f"{prefix}/{base}-{uuid.uuid4().hex[:8]}{ext.lower()}"


def restaurant_logo_upload_to(instance, filename):
    return _upload_path("restaurants/logos", instance, filename)


def verification_document_upload_to(instance, filename):
    return _upload_path(f"restaurants/verification/{instance.pk or 'new'}", instance, filename)


def menu_media_upload_to(instance, filename):
    return _upload_path(f"restaurants/menu/{instance.menu_item_id}", instance, filename)


class Restaurant(models.Model):
    STATUS_UNVERIFIED = "unverified"
    STATUS_PENDING = "pending"
    STATUS_VERIFIED = "verified"
    STATUS_REJECTED = "rejected"
    VERIFICATION_CHOICES = [
        (STATUS_UNVERIFIED, "Unverified"),
        (STATUS_PENDING, "Pending"),
        (STATUS_VERIFIED, "Verified"),
        (STATUS_REJECTED, "Rejected"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="restaurants",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    cuisine_type = models.CharField(max_length=100)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100, db_index=True)
    state = models.CharField(max_length=100)
    zipcode = models.CharField(max_length=20)
    phone = models.CharField(max_length=32)
    website = models.URLField(blank=True)
    logo = models.ImageField(upload_to=restaurant_logo_upload_to, blank=True, null=True)

    # Verification
    ein_number = models.CharField(max_length=32, blank=True)
    business_license_number = models.CharField(max_length=64, blank=True)
    owner_name = models.CharField(max_length=255, blank=True)
    owner_email = models.EmailField(blank=True)
    owner_ssn_last4 = models.CharField(
        max_length=4,
        blank=True,
        validators=[RegexValidator(r"^\d{4}$", "Must be 4 digits")],
    )
    drivers_license_image = models.FileField(upload_to=verification_document_upload_to, blank=True, null=True)
    business_license_image = models.FileField(upload_to=verification_document_upload_to, blank=True, null=True)
    verification_status = models.CharField(
        max_length=16,
        choices=VERIFICATION_CHOICES,
        default=STATUS_UNVERIFIED,
        db_index=True,
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="verified_restaurants",
    )

    has_signed_contract = models.BooleanField(default=False)
    default_ambassador_fee_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.name} ({self.city})"

    @property
    def is_verified(self) -> bool:
        return self.verification_status == self.STATUS_VERIFIED


class MenuItem(models.Model):
    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name="menu_items")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} @ {self.restaurant_id}"


class MenuItemIngredient(models.Model):
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name="ingredients")
    name = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name


class MenuItemMedia(models.Model):
    TYPE_IMAGE = "image"
    TYPE_VIDEO = "video"
    MEDIA_TYPE_CHOICES = [
        (TYPE_IMAGE, "Image"),
        (TYPE_VIDEO, "Video"),
    ]

    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name="media")
    file = models.FileField(upload_to=menu_media_upload_to, blank=True, null=True)
    url = models.URLField(blank=True)
    media_type = models.CharField(max_length=10, choices=MEDIA_TYPE_CHOICES, default=TYPE_IMAGE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    @property
    def media_url(self) -> str:
        if self.file:
            return self.file.url
        return self.url


class RestaurantContract(models.Model):
    """A signature on the platform terms for a restaurant."""

    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name="contracts")
    signed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        on_delete=models.SET_NULL,
        related_name="signed_contracts",
    )
    signed_at = models.DateTimeField(auto_now_add=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    terms_version = models.CharField(max_length=32, default="1.0")
    contract_url = models.URLField(blank=True)

    class Meta:
        ordering = ["-signed_at"]

    def __str__(self) -> str:
        return f"Contract v{self.terms_version} for {self.restaurant_id}"
