"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/register/          - Registration
    /api/v1/auth/verify/            - Account verification
    /api/v1/auth/login/             - JWT obtain pair
    /api/v1/auth/token/refresh/     - JWT refresh (rotating, blacklisted)
    /api/v1/auth/password/forgot/   - Request reset key
    /api/v1/auth/password/reset/    - Confirm reset
    /api/v1/auth/me/                - Current user (GET/PATCH/DELETE)
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from authentication.views import (
    LoginView,
    MeView,
    PasswordForgotView,
    PasswordResetView,
    RegisterView,
    VerifyView,
)

app_name = "authentication"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("verify/", VerifyView.as_view(), name="verify"),
    path("login/", LoginView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("password/forgot/", PasswordForgotView.as_view(), name="password-forgot"),
    path("password/reset/", PasswordResetView.as_view(), name="password-reset"),
    path("me/", MeView.as_view(), name="me"),
]
