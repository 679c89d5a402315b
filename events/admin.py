"""
Admin configuration for the events app.
"""
from django.contrib import admin

from .models import AffiliateLink, AffiliateTracking, Event, EventMenuSelection


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("title", "restaurant", "date", "time", "published", "approval_status", "tickets_sold", "capacity")
    list_filter = ("published", "approval_status", "restaurant__city")
    search_fields = ("title", "restaurant__name")
    date_hierarchy = "date"


@admin.register(EventMenuSelection)
class EventMenuSelectionAdmin(admin.ModelAdmin):
    list_display = ("event", "user", "menu_item", "created_at")


@admin.register(AffiliateLink)
class AffiliateLinkAdmin(admin.ModelAdmin):
    list_display = ("code", "event", "user", "created_at")
    search_fields = ("code", "user__email")


@admin.register(AffiliateTracking)
class AffiliateTrackingAdmin(admin.ModelAdmin):
    list_display = ("affiliate_link", "action_type", "conversion_value", "created_at")
    list_filter = ("action_type",)
