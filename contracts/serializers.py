from rest_framework import serializers

from .models import ContractTemplate


class ContractTemplateSerializer(serializers.ModelSerializer):
    created_by = serializers.PrimaryKeyRelatedField(read_only=True)
    updated_by = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = ContractTemplate
        fields = [
            "id",
            "name",
            "description",
            "content",
            "type",
            "variables",
            "version",
            "is_active",
            "storage_path",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_by", "updated_by", "created_at", "updated_at"]
        extra_kwargs = {
            "name": {"error_messages": {"blank": "Template name is required", "required": "Template name is required"}},
        }

    def validate_variables(self, value):
        if value is None:
            return []
        if not isinstance(value, list):
            raise serializers.ValidationError("Variables must be a list")
        return value


class RenderSerializer(serializers.Serializer):
    values = serializers.DictField(required=False, default=dict)
    restaurant_id = serializers.IntegerField(required=False)
