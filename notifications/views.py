"""
Endpoints that queue outbound notifications.

Both return as soon as the Celery task is enqueued; delivery problems
are logged by the task and never reach the client.
"""
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsAdminRole

from .serializers import CustomEmailSerializer, MemberNotificationSerializer
from .tasks import send_custom_email, send_member_notification


class MemberNotificationView(APIView):
    """POST { "name", "email", "phone"? } from the membership form."""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = MemberNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        send_member_notification.delay(data["email"], data["name"], data.get("phone", ""))
        return Response({"success": True, "message": "Notification queued"}, status=status.HTTP_202_ACCEPTED)


class CustomEmailView(APIView):
    permission_classes = [IsAdminRole]

    def post(self, request):
        serializer = CustomEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        send_custom_email.delay(data["to"], data["subject"], data["body"], data.get("html_body", ""))
        return Response({"success": True}, status=status.HTTP_202_ACCEPTED)
