from django.db import transaction
from rest_framework import serializers

from events.models import Event
from restaurants.models import Restaurant

from .models import Memory, MemoryAttendee, MemoryContent, MemoryDish


class MemoryContentSerializer(serializers.ModelSerializer):
    url = serializers.CharField(read_only=True)

    class Meta:
        model = MemoryContent
        fields = ["id", "content_type", "file", "content_url", "content_text", "url", "created_at"]
        read_only_fields = ["id", "url", "created_at"]
        extra_kwargs = {"file": {"write_only": True, "required": False}}

    def validate(self, attrs):
        if attrs["content_type"] == MemoryContent.TYPE_PHOTO:
            if not attrs.get("file") and not attrs.get("content_url"):
                raise serializers.ValidationError("A photo needs a file or a URL")
        elif not (attrs.get("content_text") or "").strip():
            raise serializers.ValidationError("A note cannot be empty")
        return attrs


class MemoryDishSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = MemoryDish
        fields = ["id", "dish_name", "user_id", "created_at"]
        read_only_fields = ["id", "user_id", "created_at"]


class MemoryAttendeeSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField()
    email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = MemoryAttendee
        fields = ["id", "user_id", "email", "is_tagged", "created_at"]
        read_only_fields = ["id", "email", "created_at"]


class MemorySerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    event_id = serializers.PrimaryKeyRelatedField(
        queryset=Event.objects.all(), source="event", required=False, allow_null=True
    )
    restaurant_id = serializers.PrimaryKeyRelatedField(
        queryset=Restaurant.objects.all(), source="restaurant", required=False, allow_null=True
    )
    contents = MemoryContentSerializer(many=True, read_only=True)
    dishes = MemoryDishSerializer(many=True, read_only=True)
    attendees = MemoryAttendeeSerializer(many=True, read_only=True)
    dish_names = serializers.ListField(
        child=serializers.CharField(max_length=255, allow_blank=True), write_only=True, required=False
    )

    class Meta:
        model = Memory
        fields = [
            "id",
            "user_id",
            "title",
            "location",
            "date",
            "privacy",
            "event_id",
            "restaurant_id",
            "is_auto_generated",
            "contents",
            "dishes",
            "attendees",
            "dish_names",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "user_id", "is_auto_generated", "created_at", "updated_at"]
        extra_kwargs = {
            "title": {"error_messages": {"blank": "Title is required", "required": "Title is required"}},
            "location": {"error_messages": {"blank": "Location is required", "required": "Location is required"}},
        }

    @transaction.atomic
    def create(self, validated_data):
        dish_names = validated_data.pop("dish_names", [])
        memory = Memory.objects.create(**validated_data)
        MemoryDish.objects.bulk_create(
            [MemoryDish(memory=memory, user=memory.user, dish_name=n.strip()) for n in dish_names if n.strip()]
        )
        return memory

    @transaction.atomic
    def update(self, instance, validated_data):
        dish_names = validated_data.pop("dish_names", None)
        instance = super().update(instance, validated_data)
        if dish_names is not None:
            instance.dishes.all().delete()
            MemoryDish.objects.bulk_create(
                [MemoryDish(memory=instance, user=instance.user, dish_name=n.strip()) for n in dish_names
                 if n.strip()]
            )
        return instance
