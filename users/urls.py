"""
Authentication and account endpoints for the users app.

Login is via email + password only; the admin user directory is
registered on the project router.
"""
from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    EmailTokenObtainPairView,
    ForgotPasswordView,
    LogoutView,
    MeView,
    RegisterView,
    SetPasswordView,
)

urlpatterns = [
    path("login/", EmailTokenObtainPairView.as_view(), name="login"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("token/", EmailTokenObtainPairView.as_view(), name="token_obtain_pair_email"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),

    path("register/", RegisterView.as_view(), name="register"),
    path("password/set/", SetPasswordView.as_view(), name="password_set"),
    path("password/forgot/", ForgotPasswordView.as_view(), name="password_forgot"),

    path("me/", MeView.as_view(), name="me"),
]
