"""
Serializers for the payments app.

These serializers expose tickets to the REST API and validate the
checkout and verification payloads.  Stripe calls happen in
``payments.services``.
"""
from __future__ import annotations

from rest_framework import serializers
from rest_framework.exceptions import NotFound

from events.models import Event
from restaurants.serializers import RestaurantLiteSerializer

from .models import Ticket


class TicketEventSerializer(serializers.ModelSerializer):
    restaurant = RestaurantLiteSerializer(read_only=True)

    class Meta:
        model = Event
        fields = ["id", "title", "date", "time", "price", "cover_image", "restaurant"]


class TicketSerializer(serializers.ModelSerializer):
    """Serializer for Ticket objects (read-only)."""

    event = TicketEventSerializer(read_only=True)
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Ticket
        fields = [
            "id",
            "event",
            "user_id",
            "quantity",
            "price",
            "service_fee",
            "total_amount",
            "payment_id",
            "payment_status",
            "purchase_date",
            "created_at",
        ]
        read_only_fields = fields


class CheckoutRequestSerializer(serializers.Serializer):
    """Serializer for initiating a ticket purchase (checkout)."""

    event_id = serializers.IntegerField()
    quantity = serializers.IntegerField(
        min_value=1,
        error_messages={"min_value": "Quantity must be at least 1"},
    )
    ref = serializers.CharField(required=False, allow_blank=True, max_length=100)

    def validate(self, attrs):
        event = Event.objects.filter(pk=attrs["event_id"], published=True).first()
        if event is None:
            raise NotFound("Event not found")
        attrs["event"] = event
        return attrs


class VerifySessionSerializer(serializers.Serializer):
    session_id = serializers.CharField(
        max_length=255,
        error_messages={"required": "Missing session ID", "blank": "Missing session ID"},
    )
