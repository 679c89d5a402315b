from rest_framework import serializers

from .models import BillingRecord


class BillingRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillingRecord
        fields = ["id", "email", "amount", "kind", "paid_at", "expires_at", "receipt_url", "payment_id"]
        read_only_fields = fields


class MonthlyRevenueSerializer(serializers.Serializer):
    month = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class FeeConfigSerializer(serializers.Serializer):
    restaurant_monthly_fee = serializers.DecimalField(max_digits=10, decimal_places=2)
    signup_commission_value = serializers.DecimalField(max_digits=10, decimal_places=2)
    signup_commission_type = serializers.CharField()
    ticket_commission_value = serializers.DecimalField(max_digits=10, decimal_places=2)
    ticket_commission_type = serializers.CharField()
