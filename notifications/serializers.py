from rest_framework import serializers

from users.serializers import _django_errors
from users.validators import validate_phone


class MemberNotificationSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=255,
                                 error_messages={"min_length": "Name must be at least 2 characters"})
    email = serializers.EmailField(error_messages={"invalid": "Please enter a valid email address"})
    phone = serializers.CharField(required=False, allow_blank=True)

    def validate_phone(self, value):
        return _django_errors(validate_phone, value)


class CustomEmailSerializer(serializers.Serializer):
    to = serializers.EmailField()
    subject = serializers.CharField(max_length=255)
    body = serializers.CharField()
    html_body = serializers.CharField(required=False, allow_blank=True)
