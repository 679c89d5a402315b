from django.urls import path

from .views import CustomEmailView, MemberNotificationView

urlpatterns = [
    path("notifications/member/", MemberNotificationView.as_view(), name="member-notification"),
    path("notifications/custom-email/", CustomEmailView.as_view(), name="custom-email"),
]
