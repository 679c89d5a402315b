from django.contrib import admin

from .models import ContractTemplate


@admin.register(ContractTemplate)
class ContractTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "version", "is_active", "updated_at")
    list_filter = ("type", "is_active")
    search_fields = ("name", "description")
    readonly_fields = ("created_by", "updated_by", "created_at", "updated_at")
