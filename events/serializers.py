"""
Serializers for the events app.

`EventSerializer` takes a ``restaurant_id`` on create; ownership of
that restaurant is checked in the view.  Approval and publication
fields are only changed through the dedicated actions.
"""
from django.conf import settings
from rest_framework import serializers

from restaurants.models import MenuItem, Restaurant
from restaurants.serializers import MenuItemSerializer, RestaurantLiteSerializer

from .models import AffiliateLink, Event, EventMenuSelection


class EventSerializer(serializers.ModelSerializer):
    restaurant_id = serializers.PrimaryKeyRelatedField(
        source="restaurant", queryset=Restaurant.objects.all()
    )
    restaurant = RestaurantLiteSerializer(read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    tickets_remaining = serializers.IntegerField(read_only=True)

    class Meta:
        model = Event
        fields = [
            "id",
            "restaurant_id",
            "restaurant",
            "user_id",
            "title",
            "description",
            "date",
            "time",
            "capacity",
            "price",
            "cover_image",
            "published",
            "tickets_sold",
            "tickets_remaining",
            "approval_status",
            "submitted_for_approval_at",
            "approval_date",
            "rejection_date",
            "rejection_reason",
            "ambassador_fee_percentage",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "user_id",
            "published",
            "tickets_sold",
            "approval_status",
            "submitted_for_approval_at",
            "approval_date",
            "rejection_date",
            "rejection_reason",
            "created_at",
            "updated_at",
        ]

    def validate_title(self, value: str) -> str:
        if value and value.isdigit():
            raise serializers.ValidationError("Title cannot be only numbers.")
        if len((value or "").strip()) < 3:
            raise serializers.ValidationError("Title must be at least 3 characters long.")
        return value.strip()

    def validate_capacity(self, value):
        if value < 1:
            raise serializers.ValidationError("Capacity must be at least 1.")
        return value

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value

    def validate(self, attrs):
        capacity = attrs.get("capacity")
        if self.instance is not None and capacity is not None and capacity < self.instance.tickets_sold:
            raise serializers.ValidationError(
                {"capacity": f"Capacity cannot be lower than tickets already sold ({self.instance.tickets_sold})."}
            )
        return attrs


class RejectEventSerializer(serializers.Serializer):
    reason = serializers.CharField(error_messages={"blank": "A rejection reason is required."})


class MenuSelectionSerializer(serializers.Serializer):
    """Replaces the caller's dish selection for an event."""
    menu_item_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)

    def validate_menu_item_ids(self, value):
        event = self.context["event"]
        ids = list(dict.fromkeys(value))
        found = set(
            MenuItem.objects.filter(pk__in=ids, restaurant_id=event.restaurant_id).values_list("pk", flat=True)
        )
        missing = [i for i in ids if i not in found]
        if missing:
            raise serializers.ValidationError(
                "Menu items must belong to this event's restaurant: %s" % ", ".join(map(str, missing))
            )
        return ids


class EventMenuSelectionSerializer(serializers.ModelSerializer):
    menu_item = MenuItemSerializer(read_only=True)

    class Meta:
        model = EventMenuSelection
        fields = ["id", "event_id", "user_id", "menu_item", "created_at"]


class AffiliateLinkSerializer(serializers.ModelSerializer):
    event_title = serializers.CharField(source="event.title", read_only=True)
    url = serializers.SerializerMethodField()

    class Meta:
        model = AffiliateLink
        fields = ["id", "event_id", "event_title", "user_id", "code", "url", "created_at", "updated_at"]

    def get_url(self, obj) -> str:
        return f"{settings.FRONTEND_URL}/event/{obj.event_id}?ref={obj.code}"


class TrackClickSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=100)
