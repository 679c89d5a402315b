"""
Serializers for the restaurants app.

Verification details (EIN, license numbers, SSN digits and uploaded
documents) are only rendered for the owner and admins.
"""
from django.db import transaction
from rest_framework import serializers

from users.serializers import _django_errors
from users.validators import validate_phone

from .models import MenuItem, MenuItemIngredient, MenuItemMedia, Restaurant, RestaurantContract
from .permissions import owns_restaurant

ALLOWED_DOCUMENT_TYPES = ("image/jpeg", "image/png", "application/pdf")
MAX_DOCUMENT_SIZE = 5 * 1024 * 1024

PRIVATE_FIELDS = (
    "ein_number",
    "business_license_number",
    "owner_name",
    "owner_email",
    "owner_ssn_last4",
    "drivers_license_image",
    "business_license_image",
)


class RestaurantSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Restaurant
        fields = [
            "id",
            "user_id",
            "name",
            "description",
            "cuisine_type",
            "address",
            "city",
            "state",
            "zipcode",
            "phone",
            "website",
            "logo",
            "verification_status",
            "verified_at",
            "has_signed_contract",
            "default_ambassador_fee_percentage",
            *PRIVATE_FIELDS,
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "verification_status",
            "verified_at",
            "has_signed_contract",
            *PRIVATE_FIELDS,
            "created_at",
            "updated_at",
        ]

    def validate_name(self, value: str) -> str:
        if len(value.strip()) < 2:
            raise serializers.ValidationError("Restaurant name must be at least 2 characters.")
        return value.strip()

    def validate_phone(self, value):
        return _django_errors(validate_phone, value)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get("request")
        if not (request and owns_restaurant(request.user, instance)):
            for field in PRIVATE_FIELDS:
                data.pop(field, None)
        return data


class RestaurantLiteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Restaurant
        fields = ["id", "name", "cuisine_type", "address", "city", "state", "logo"]


class VerificationSubmitSerializer(serializers.ModelSerializer):
    ein_number = serializers.CharField(error_messages={"blank": "EIN number is required"})
    business_license_number = serializers.CharField(
        error_messages={"blank": "Business license number is required"}
    )
    owner_name = serializers.CharField(error_messages={"blank": "Owner name is required"})
    owner_ssn_last4 = serializers.RegexField(r"^\d{4}$", error_messages={"invalid": "Must be 4 digits"})

    class Meta:
        model = Restaurant
        fields = [
            "ein_number",
            "business_license_number",
            "owner_name",
            "owner_email",
            "owner_ssn_last4",
            "drivers_license_image",
            "business_license_image",
        ]

    def _validate_document(self, value):
        if value is None:
            return value
        content_type = getattr(value, "content_type", None)
        if content_type and content_type not in ALLOWED_DOCUMENT_TYPES:
            raise serializers.ValidationError("Please upload a JPG, PNG or PDF file")
        if value.size > MAX_DOCUMENT_SIZE:
            raise serializers.ValidationError("Please upload a file smaller than 5MB")
        return value

    def validate_drivers_license_image(self, value):
        return self._validate_document(value)

    def validate_business_license_image(self, value):
        return self._validate_document(value)


class VerificationDecisionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)


class MenuItemMediaSerializer(serializers.ModelSerializer):
    media_url = serializers.CharField(read_only=True)

    class Meta:
        model = MenuItemMedia
        fields = ["id", "file", "url", "media_type", "media_url", "created_at"]
        read_only_fields = ["id", "media_url", "created_at"]
        extra_kwargs = {"file": {"write_only": True, "required": False}}

    def validate(self, attrs):
        if not attrs.get("file") and not attrs.get("url"):
            raise serializers.ValidationError("Provide either a file or a url.")
        return attrs


class MenuItemSerializer(serializers.ModelSerializer):
    """Menu item with its ingredient names and media; saving replaces the ingredient list."""
    restaurant_id = serializers.IntegerField(read_only=True)
    ingredients = serializers.ListField(
        child=serializers.CharField(max_length=100, allow_blank=True),
        required=False,
        write_only=True,
    )
    media = MenuItemMediaSerializer(many=True, read_only=True)

    class Meta:
        model = MenuItem
        fields = [
            "id",
            "restaurant_id",
            "name",
            "description",
            "price",
            "ingredients",
            "media",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "restaurant_id", "created_at", "updated_at"]

    def validate_name(self, value: str) -> str:
        if not value.strip():
            raise serializers.ValidationError("Name is required")
        return value.strip()

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price must be a positive number")
        return value

    def validate_ingredients(self, value):
        return [v.strip() for v in value if v and v.strip()]

    def _replace_ingredients(self, item, names):
        item.ingredients.all().delete()
        MenuItemIngredient.objects.bulk_create(
            [MenuItemIngredient(menu_item=item, name=n) for n in names]
        )

    @transaction.atomic
    def create(self, validated_data):
        names = validated_data.pop("ingredients", [])
        item = super().create(validated_data)
        self._replace_ingredients(item, names)
        return item

    @transaction.atomic
    def update(self, instance, validated_data):
        names = validated_data.pop("ingredients", None)
        item = super().update(instance, validated_data)
        if names is not None:
            self._replace_ingredients(item, names)
        return item

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["ingredients"] = [i.name for i in instance.ingredients.all()]
        return data


class RestaurantContractSerializer(serializers.ModelSerializer):
    signed_by_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = RestaurantContract
        fields = ["id", "restaurant_id", "signed_by_id", "signed_at", "ip_address", "terms_version", "contract_url"]
        read_only_fields = ["id", "restaurant_id", "signed_by_id", "signed_at", "ip_address"]
