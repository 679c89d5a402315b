from django.contrib import admin

from .models import Memory, MemoryAttendee, MemoryContent, MemoryDish


class MemoryContentInline(admin.TabularInline):
    model = MemoryContent
    extra = 0


class MemoryDishInline(admin.TabularInline):
    model = MemoryDish
    extra = 0
    raw_id_fields = ("user",)


class MemoryAttendeeInline(admin.TabularInline):
    model = MemoryAttendee
    extra = 0
    raw_id_fields = ("user",)


@admin.register(Memory)
class MemoryAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "date", "privacy", "is_auto_generated")
    list_filter = ("privacy", "is_auto_generated")
    search_fields = ("title", "location", "user__email")
    inlines = [MemoryContentInline, MemoryDishInline, MemoryAttendeeInline]
