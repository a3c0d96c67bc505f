"""
Authentication services.

This module provides AccountService for registration, key-based account
verification, password reset and preference updates.

Related files:
    - models.py: User
    - tasks.py: Async email sending
    - views.py: HTTP endpoints calling this service

Security:
    - Keys are generated with the secrets module
    - Password reset never reveals whether an email is registered
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import IntegrityError

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.services import BaseService, ServiceResult

from authentication.models import User, generate_numeric_key

if TYPE_CHECKING:
    from collections.abc import Mapping


class AccountService(BaseService):
    """
    Account lifecycle operations.

    Methods:
        register: Create an unverified user and queue the verification email
        verify: Confirm an account with its verification key
        request_password_reset: Store a reset key and email it
        reset_password: Set a new password using the reset key
        update_settings: Change volume/language/avatar
        delete_account: Remove the user (chat data keeps ghost references)
    """

    SETTINGS_FIELDS = ("volume", "language", "avatar")

    @classmethod
    def register(cls, email: str, username: str, password: str) -> ServiceResult[User]:
        """
        Create a new unverified account.

        Error codes:
            EMAIL_EXISTS: Email already registered
            USERNAME_EXISTS: Username already taken
        """
        email = User.objects.normalize_email(email.strip())
        username = username.strip()

        if User.objects.filter(email__iexact=email).exists():
            return ServiceResult.from_error(
                ConflictError("Email is already registered", error_code="EMAIL_EXISTS")
            )
        if User.objects.filter(username=username).exists():
            return ServiceResult.from_error(
                ConflictError("Username is already taken", error_code="USERNAME_EXISTS")
            )

        try:
            with cls.atomic():
                user = User.objects.create_user(
                    email=email, username=username, password=password
                )
        except IntegrityError:
            return ServiceResult.from_error(
                ConflictError(
                    "Email or username is already registered",
                    error_code="ACCOUNT_EXISTS",
                )
            )

        from authentication.tasks import send_verification_email

        cls.on_commit(lambda: send_verification_email.delay(user.id))

        cls.get_logger().info(f"Registered user {user.id}")
        return ServiceResult.success(user)

    @classmethod
    def verify(cls, email: str, key: str) -> ServiceResult[User]:
        """
        Verify an account with the key sent at registration.

        Verifying an already verified account is a no-op success.

        Error codes:
            USER_NOT_FOUND: No account for this email
            INVALID_KEY: Key does not match
        """
        user = User.objects.filter(email__iexact=email.strip()).first()
        if user is None:
            return ServiceResult.from_error(
                NotFoundError("User not found", error_code="USER_NOT_FOUND")
            )

        if user.is_verified:
            return ServiceResult.success(user)

        if user.verification_key != key.strip():
            return ServiceResult.from_error(
                ValidationError("Invalid verification key", error_code="INVALID_KEY")
            )

        user.is_verified = True
        user.save(update_fields=["is_verified", "updated_at"])

        cls.get_logger().info(f"Verified user {user.id}")
        return ServiceResult.success(user)

    @classmethod
    def request_password_reset(cls, email: str) -> ServiceResult[None]:
        """
        Generate a reset key and email it.

        Always succeeds so callers cannot probe which emails exist.
        """
        user = User.objects.filter(email__iexact=email.strip()).first()
        if user is None:
            cls.get_logger().debug("Password reset requested for unknown email")
            return ServiceResult.success(None)

        user.reset_key = generate_numeric_key()
        user.save(update_fields=["reset_key", "updated_at"])

        from authentication.tasks import send_password_reset_email

        cls.on_commit(lambda: send_password_reset_email.delay(user.id))

        cls.get_logger().info(f"Password reset requested for user {user.id}")
        return ServiceResult.success(None)

    @classmethod
    def reset_password(
        cls, email: str, key: str, new_password: str
    ) -> ServiceResult[None]:
        """
        Set a new password using a pending reset key.

        Error codes:
            INVALID_KEY: No pending key, or key does not match
        """
        user = User.objects.filter(email__iexact=email.strip()).first()
        if user is None or not user.reset_key or user.reset_key != key.strip():
            return ServiceResult.from_error(
                ValidationError("Invalid or expired reset key", error_code="INVALID_KEY")
            )

        user.set_password(new_password)
        user.reset_key = ""
        user.save(update_fields=["password", "reset_key", "updated_at"])

        cls.get_logger().info(f"Password reset for user {user.id}")
        return ServiceResult.success(None)

    @classmethod
    def update_settings(cls, user: User, changes: Mapping) -> ServiceResult[User]:
        """
        Apply preference changes (volume, language, avatar).

        Unknown keys are ignored; validation of values happens in the
        serializer.
        """
        fields = [name for name in cls.SETTINGS_FIELDS if name in changes]
        for name in fields:
            setattr(user, name, changes[name])

        if fields:
            user.save(update_fields=[*fields, "updated_at"])
            cls.get_logger().info(f"Updated settings {fields} for user {user.id}")

        return ServiceResult.success(user)

    @classmethod
    def delete_account(cls, user: User) -> ServiceResult[None]:
        """
        Permanently delete the user.

        Chat memberships and messages are preserved with NULL user
        references by the chat models' on_delete rules.
        """
        user_id = user.id
        with cls.atomic():
            user.delete()

        cls.get_logger().info(f"Deleted account {user_id}")
        return ServiceResult.success(None)
