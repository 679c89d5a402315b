"""
Models for the memories app.

A `Memory` is a member's keepsake of a meal: photos and notes
(`MemoryContent`), the dishes they had (`MemoryDish`) and who they were
with (`MemoryAttendee`).  ``privacy`` controls who else can see it.
"""
import os
import uuid

from django.conf import settings
from django.db import models


def memory_content_upload_to(instance, filename):
    ext = os.path.splitext(filename)[1].lower()
    return f"memories/{instance.memory_id}/{uuid.uuid4().hex}{ext}"


class Memory(models.Model):
    PRIVACY_PUBLIC = "public"
    PRIVACY_PRIVATE = "private"
    PRIVACY_UNLISTED = "unlisted"
    PRIVACY_CHOICES = [
        (PRIVACY_PUBLIC, "Public"),
        (PRIVACY_PRIVATE, "Private"),
        (PRIVACY_UNLISTED, "Unlisted"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="memories")
    title = models.CharField(max_length=255)
    location = models.CharField(max_length=255)
    date = models.DateField()
    privacy = models.CharField(max_length=16, choices=PRIVACY_CHOICES, default=PRIVACY_PRIVATE, db_index=True)
    event = models.ForeignKey(
        "events.Event",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="memories",
    )
    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="memories",
    )
    is_auto_generated = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        verbose_name_plural = "memories"

    def __str__(self) -> str:
        return f"{self.title} ({self.date})"


class MemoryContent(models.Model):
    TYPE_PHOTO = "photo"
    TYPE_NOTE = "note"
    TYPE_CHOICES = [
        (TYPE_PHOTO, "Photo"),
        (TYPE_NOTE, "Note"),
    ]

    memory = models.ForeignKey(Memory, on_delete=models.CASCADE, related_name="contents")
    content_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    file = models.FileField(upload_to=memory_content_upload_to, blank=True, null=True)
    content_url = models.URLField(max_length=500, blank=True)
    content_text = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    @property
    def url(self) -> str:
        if self.file:
            return self.file.url
        return self.content_url


class MemoryDish(models.Model):
    memory = models.ForeignKey(Memory, on_delete=models.CASCADE, related_name="dishes")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="memory_dishes")
    dish_name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        verbose_name_plural = "memory dishes"


class MemoryAttendee(models.Model):
    memory = models.ForeignKey(Memory, on_delete=models.CASCADE, related_name="attendees")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="memory_attendances")
    is_tagged = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["memory", "user"], name="uniq_memory_attendee"),
        ]
