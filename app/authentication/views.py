"""
Authentication views.

This module provides API views for:
- Registration and key-based account verification
- JWT login and token refresh
- Password reset (request key, confirm with key)
- Current user retrieval, settings update and account deletion

Related files:
    - serializers.py: Request/response serialization
    - services.py: Business logic (AccountService)
    - urls.py: URL routing

URL structure:
    /api/v1/auth/register/         - Create an unverified account
    /api/v1/auth/verify/           - Verify with the emailed key
    /api/v1/auth/login/            - Obtain JWT pair
    /api/v1/auth/token/refresh/    - Refresh JWT
    /api/v1/auth/password/forgot/  - Email a reset key
    /api/v1/auth/password/reset/   - Set a new password with the key
    /api/v1/auth/me/               - GET / PATCH / DELETE current user
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from authentication.serializers import (
    LoginSerializer,
    PasswordForgotSerializer,
    PasswordResetSerializer,
    RegisterSerializer,
    SettingsUpdateSerializer,
    UserSerializer,
    VerifySerializer,
)
from authentication.services import AccountService


class RegisterView(APIView):
    """
    POST: Create an unverified account and email the verification key.

    URL: /api/v1/auth/register/
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Register",
        description="Create an account. A 6-digit verification key is emailed.",
        tags=["Auth"],
        request=RegisterSerializer,
        responses={201: UserSerializer},
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AccountService.register(**serializer.validated_data).unwrap()

        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class VerifyView(APIView):
    """
    POST: Verify an account with its key.

    URL: /api/v1/auth/verify/
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Verify account",
        tags=["Auth"],
        request=VerifySerializer,
        responses={200: UserSerializer},
    )
    def post(self, request):
        serializer = VerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AccountService.verify(**serializer.validated_data).unwrap()

        return Response(UserSerializer(user).data)


@extend_schema(summary="Log in", tags=["Auth"])
class LoginView(TokenObtainPairView):
    """
    POST: Exchange email and password for an access/refresh token pair.

    URL: /api/v1/auth/login/

    Returns:
        {"access": "...", "refresh": "...", "user": {...}}
    """

    serializer_class = LoginSerializer


class PasswordForgotView(APIView):
    """
    POST: Email a password reset key.

    URL: /api/v1/auth/password/forgot/

    The response is identical whether or not the email is registered.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Request password reset",
        tags=["Auth"],
        request=PasswordForgotSerializer,
    )
    def post(self, request):
        serializer = PasswordForgotSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AccountService.request_password_reset(
            serializer.validated_data["email"]
        ).unwrap()

        return Response(
            {"detail": "If the account exists, a reset key has been sent"}
        )


class PasswordResetView(APIView):
    """
    POST: Set a new password using the emailed key.

    URL: /api/v1/auth/password/reset/
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Reset password",
        tags=["Auth"],
        request=PasswordResetSerializer,
    )
    def post(self, request):
        serializer = PasswordResetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AccountService.reset_password(**serializer.validated_data).unwrap()

        return Response({"detail": "Password has been reset"})


class MeView(APIView):
    """
    Current user operations.

    GET: Retrieve the current user
    PATCH: Update settings (volume, language, avatar)
    DELETE: Permanently delete the account

    URL: /api/v1/auth/me/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get current user",
        tags=["Auth - Account"],
        responses={200: UserSerializer},
    )
    def get(self, request):
        return Response(UserSerializer(request.user).data)

    @extend_schema(
        summary="Update settings",
        tags=["Auth - Account"],
        request=SettingsUpdateSerializer,
        responses={200: UserSerializer},
    )
    def patch(self, request):
        serializer = SettingsUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        user = AccountService.update_settings(
            request.user, serializer.validated_data
        ).unwrap()

        return Response(UserSerializer(user).data)

    @extend_schema(
        summary="Delete account",
        description=(
            "Delete the current user. Chat memberships and messages remain "
            "with the user reference removed."
        ),
        tags=["Auth - Account"],
        responses={204: None},
    )
    def delete(self, request):
        AccountService.delete_account(request.user).unwrap()
        return Response(status=status.HTTP_204_NO_CONTENT)
