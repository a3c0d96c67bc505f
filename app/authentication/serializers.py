"""
Serializers for authentication.

This module provides DRF serializers for:
- User model (read operations)
- Registration and key-based verification
- JWT login (email + password) returning the user alongside the tokens
- Password reset request and confirmation
- Settings updates (volume, language, avatar)

Related files:
    - models.py: User model and username validators
    - views.py: Views that use these serializers
    - services.py: AccountService business logic

Security:
    - Password fields are write-only
    - Passwords run through Django's password validators
"""

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import exceptions, serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from authentication.models import (
    Language,
    User,
    Volume,
    validate_username_format,
    validate_username_not_reserved,
)


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for User model (read operations).

    Used by the /auth/me/ endpoint and embedded in login responses.
    """

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "avatar",
            "is_verified",
            "volume",
            "language",
            "date_joined",
        ]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """
    Validate a registration request.

    Uniqueness is checked by AccountService so conflicts map to 409.
    """

    email = serializers.EmailField(max_length=254)
    username = serializers.CharField(
        min_length=3,
        max_length=30,
        help_text="Unique username (3-30 chars, alphanumeric + _ + -)",
    )
    password = serializers.CharField(write_only=True, style={"input_type": "password"})

    def validate_username(self, value):
        value = value.strip()
        try:
            validate_username_format(value)
            validate_username_not_reserved(value)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages)
        return value

    def validate_password(self, value):
        validate_password(value)
        return value


class VerifySerializer(serializers.Serializer):
    """Verification request: email plus the 6-digit key."""

    email = serializers.EmailField()
    key = serializers.RegexField(r"^\d{6}$", help_text="6-digit verification key")


class LoginSerializer(TokenObtainPairSerializer):
    """
    JWT login keyed by email.

    Adds the serialized user to the token pair and refuses accounts that
    were never verified.
    """

    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_verified:
            raise exceptions.AuthenticationFailed(
                "Account is not verified", code="account_not_verified"
            )
        data["user"] = UserSerializer(self.user).data
        return data


class PasswordForgotSerializer(serializers.Serializer):
    """Password reset request."""

    email = serializers.EmailField()


class PasswordResetSerializer(serializers.Serializer):
    """Password reset confirmation with the emailed key."""

    email = serializers.EmailField()
    key = serializers.RegexField(r"^\d{6}$", help_text="6-digit reset key")
    new_password = serializers.CharField(
        write_only=True, style={"input_type": "password"}
    )

    def validate_new_password(self, value):
        validate_password(value)
        return value


class SettingsUpdateSerializer(serializers.Serializer):
    """
    Partial update of user preferences.

    All fields are optional; only provided ones are changed.
    """

    volume = serializers.ChoiceField(choices=Volume.choices, required=False)
    language = serializers.ChoiceField(choices=Language.choices, required=False)
    avatar = serializers.CharField(
        max_length=500, required=False, allow_null=True, allow_blank=True
    )

    def validate_avatar(self, value):
        return value or None
