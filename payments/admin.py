"""
Django admin registration for the payments app.
"""
from django.contrib import admin

from .models import Ticket


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "event",
        "user",
        "quantity",
        "total_amount",
        "payment_status",
        "purchase_date",
    )
    list_filter = ("payment_status",)
    search_fields = ("user__email", "payment_id", "event__title")
    ordering = ("-created_at",)
