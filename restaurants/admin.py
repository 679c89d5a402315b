from django.contrib import admin

from .models import MenuItem, MenuItemIngredient, MenuItemMedia, Restaurant, RestaurantContract


class MenuItemInline(admin.TabularInline):
    model = MenuItem
    extra = 0
    fields = ("name", "price")


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "user", "verification_status", "has_signed_contract", "created_at")
    list_filter = ("verification_status", "has_signed_contract", "city")
    search_fields = ("name", "city", "user__email")
    inlines = [MenuItemInline]


class IngredientInline(admin.TabularInline):
    model = MenuItemIngredient
    extra = 0


class MediaInline(admin.TabularInline):
    model = MenuItemMedia
    extra = 0


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "price")
    search_fields = ("name", "restaurant__name")
    inlines = [IngredientInline, MediaInline]


@admin.register(RestaurantContract)
class RestaurantContractAdmin(admin.ModelAdmin):
    list_display = ("restaurant", "signed_by", "terms_version", "signed_at", "ip_address")
    ordering = ("-signed_at",)
