"""URL routing for authentication endpoints (namespace: auth)."""

from __future__ import annotations

from django.urls import path  # type: ignore
from rest_framework_simplejwt.views import TokenRefreshView  # type: ignore

from .auth_views import (
    LoginView,
    LogoutView,
    MeView,
    PasswordResetConfirmView,
    PasswordResetRequestView,
    RegisterView,
    VerifyEmailView,
)

app_name = "auth"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("verify-email/<str:token>/", VerifyEmailView.as_view(), name="verify-email"),
    path("forgot-password/", PasswordResetRequestView.as_view(), name="forgot-password"),
    path("reset-password/<str:token>/", PasswordResetConfirmView.as_view(), name="reset-password"),
    path("me/", MeView.as_view(), name="me"),
    path("update-profile/", MeView.as_view(), name="update-profile"),
]
