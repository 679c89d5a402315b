from django.contrib import admin

from .models import FeatureFlag, FeatureFlagValue, UserFeatureTargeting


class FeatureFlagValueInline(admin.TabularInline):
    model = FeatureFlagValue
    extra = 0


class UserFeatureTargetingInline(admin.TabularInline):
    model = UserFeatureTargeting
    extra = 0
    raw_id_fields = ("user",)


@admin.register(FeatureFlag)
class FeatureFlagAdmin(admin.ModelAdmin):
    list_display = ("feature_key", "display_name", "updated_at")
    search_fields = ("feature_key", "display_name")
    inlines = [FeatureFlagValueInline, UserFeatureTargetingInline]
