from rest_framework import serializers

from .models import FeatureFlag, FeatureFlagValue, UserFeatureTargeting


class FeatureFlagValueSerializer(serializers.ModelSerializer):
    class Meta:
        model = FeatureFlagValue
        fields = ["id", "environment", "is_enabled", "updated_at"]
        read_only_fields = fields


class UserFeatureTargetingSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = UserFeatureTargeting
        fields = ["id", "user_id", "email", "is_enabled", "updated_at"]
        read_only_fields = fields


class FeatureFlagSerializer(serializers.ModelSerializer):
    values = FeatureFlagValueSerializer(many=True, read_only=True)
    targets = UserFeatureTargetingSerializer(many=True, read_only=True)

    class Meta:
        model = FeatureFlag
        fields = ["id", "feature_key", "display_name", "description", "values", "targets", "created_at",
                  "updated_at"]
        read_only_fields = ["id", "values", "targets", "created_at", "updated_at"]


class ToggleValueSerializer(serializers.Serializer):
    environment = serializers.ChoiceField(choices=FeatureFlagValue.ENVIRONMENT_CHOICES)
    is_enabled = serializers.BooleanField()


class TargetingSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    is_enabled = serializers.BooleanField(default=True)


class UserLookupSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    email = serializers.EmailField()
