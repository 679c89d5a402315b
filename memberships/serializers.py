"""
Serializers for the memberships app.

The wizard serializers only validate input; pricing and Stripe calls
live in ``memberships.services``.
"""
from rest_framework import serializers

from restaurants.models import Restaurant
from users.serializers import _django_errors
from users.validators import validate_email_smart, validate_phone

from .models import Membership, MembershipPayment, Product


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ["id", "name", "description", "price_cents", "interval"]


class MembershipSerializer(serializers.ModelSerializer):
    product = ProductSerializer(read_only=True)
    is_active = serializers.BooleanField(read_only=True)

    class Meta:
        model = Membership
        fields = [
            "id",
            "status",
            "is_active",
            "is_subscription",
            "started_at",
            "renewal_at",
            "subscription_id",
            "product",
            "restaurant",
        ]
        read_only_fields = fields


class MembershipPaymentSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source="membership.user.email", read_only=True)

    class Meta:
        model = MembershipPayment
        fields = ["id", "membership", "email", "amount", "payment_id", "payment_method", "payment_status",
                  "receipt_url", "created_at"]
        read_only_fields = fields


class _EmailMixin:
    def validate_email(self, value):
        return _django_errors(validate_email_smart, value).lower()


class SignupSerializer(_EmailMixin, serializers.Serializer):
    email = serializers.EmailField(error_messages={"invalid": "Please enter a valid email address"})
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        trim_whitespace=False,
        error_messages={"min_length": "Password must be at least 6 characters long"},
    )
    phone = serializers.CharField(required=False, allow_blank=True)

    def validate_phone(self, value):
        return _django_errors(validate_phone, value)


class MembershipFormSerializer(_EmailMixin, serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=255,
                                 error_messages={"min_length": "Name must be at least 2 characters"})
    email = serializers.EmailField(error_messages={"invalid": "Please enter a valid email address"})
    phone = serializers.CharField(required=False, allow_blank=True)
    address = serializers.CharField(min_length=5, max_length=500,
                                    error_messages={"min_length": "Address must be at least 5 characters"})

    def validate_phone(self, value):
        return _django_errors(validate_phone, value)


class MembershipCheckoutSerializer(MembershipFormSerializer):
    password = serializers.CharField(
        write_only=True,
        required=False,
        allow_blank=True,
        min_length=6,
        trim_whitespace=False,
        error_messages={"min_length": "Password must be at least 6 characters long"},
    )
    product_id = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.filter(active=True),
        source="product",
        required=False,
        allow_null=True,
    )
    restaurant_id = serializers.PrimaryKeyRelatedField(
        queryset=Restaurant.objects.all(),
        source="restaurant",
        required=False,
        allow_null=True,
    )


class StatusCheckSerializer(serializers.Serializer):
    email = serializers.EmailField(error_messages={"required": "Email is required"})
