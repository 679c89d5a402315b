from django.contrib import admin

from .models import AdminConfig, BillingRecord


@admin.register(BillingRecord)
class BillingRecordAdmin(admin.ModelAdmin):
    list_display = ("email", "amount", "kind", "paid_at", "expires_at", "payment_id")
    list_filter = ("kind",)
    search_fields = ("email", "payment_id")
    date_hierarchy = "paid_at"


@admin.register(AdminConfig)
class AdminConfigAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")
