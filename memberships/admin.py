from django.contrib import admin

from .models import Membership, MembershipPayment, Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "price_cents", "interval", "active")
    list_filter = ("active", "interval")


class MembershipPaymentInline(admin.TabularInline):
    model = MembershipPayment
    extra = 0
    readonly_fields = ("payment_id", "amount", "payment_status", "created_at")


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "status", "is_subscription", "started_at", "renewal_at")
    list_filter = ("status", "is_subscription")
    search_fields = ("user__email", "subscription_id", "last_payment_id")
    inlines = [MembershipPaymentInline]
