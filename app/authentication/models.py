"""
Authentication models.

This module defines the User model used across the chat application:
- Identity: email (login identifier) and a unique public username
- Display: avatar URL
- Verification: one-time 6-digit key sent at registration
- Preferences: notification volume and interface language

Related files:
    - managers.py: Custom user manager for email-based creation
    - services.py: AccountService business logic
    - tasks.py: Verification and password reset emails

Deletion:
    Deleting a user never breaks chat data. Chat memberships become ghost
    rows (user set to NULL) and messages keep a NULL sender, so chatrooms
    can detect a partner whose account no longer exists.
"""

import re
import secrets

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models

from authentication.managers import UserManager


# Reserved usernames that cannot be used
RESERVED_USERNAMES = frozenset([
    "admin", "administrator", "root", "system", "api",
    "support", "help", "null", "undefined", "anonymous",
    "moderator", "bot", "deleteduser", "new-chatroom",
])


def validate_username_not_reserved(value):
    """Validate that username is not in the reserved list."""
    if value.lower() in RESERVED_USERNAMES:
        raise ValidationError(
            f"The username '{value}' is reserved and cannot be used."
        )


def validate_username_format(value):
    """Validate username format: 3-30 chars, alphanumeric + _ + -."""
    if not re.match(r"^[a-zA-Z0-9_-]{3,30}$", value):
        raise ValidationError(
            "Username must be 3-30 characters and contain only "
            "letters, numbers, underscores, and hyphens."
        )


def generate_numeric_key() -> str:
    """Return a random 6-digit key, zero padded (e.g. "004217")."""
    return f"{secrets.randbelow(1_000_000):06d}"


class Volume(models.TextChoices):
    """Notification sound volume preference."""

    OFF = "off", "Off"
    LOW = "low", "Low"
    MIDDLE = "middle", "Middle"
    HIGH = "high", "High"


class Language(models.TextChoices):
    """Interface language preference."""

    ENGLISH = "en", "English"
    GERMAN = "de", "German"
    RUSSIAN = "ru", "Russian"
    CHINESE = "ci", "Chinese"


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the login identifier.

    Fields:
        email: Login identifier, unique
        username: Public handle used to address users in chats, unique
        avatar: URL of the uploaded avatar, or null
        is_verified: Whether the account was confirmed with its key
        verification_key: One-time key emailed at registration
        reset_key: One-time password reset key (empty when none pending)
        volume: Notification volume preference
        language: Interface language preference
        is_active: Whether the account can log in
        is_staff: Whether the user can access Django admin
        date_joined: When the account was created
        updated_at: When the record was last modified

    Usage:
        user = User.objects.create_user(
            email="user@example.com",
            username="alice",
            password="securepassword",
        )
    """

    email = models.EmailField(
        unique=True,
        max_length=254,
        help_text="User's email address (login identifier)",
    )
    username = models.CharField(
        unique=True,
        max_length=30,
        validators=[validate_username_format, validate_username_not_reserved],
        help_text="Unique public username (3-30 chars, alphanumeric + _ + -)",
    )
    avatar = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        help_text="URL of the user's avatar image",
    )

    # Verification
    is_verified = models.BooleanField(
        default=False,
        help_text="Whether the account has been verified with its key",
    )
    verification_key = models.CharField(
        max_length=6,
        default=generate_numeric_key,
        help_text="One-time 6-digit verification key",
    )
    reset_key = models.CharField(
        max_length=6,
        blank=True,
        default="",
        help_text="Pending password reset key (empty when none requested)",
    )

    # Preferences
    volume = models.CharField(
        max_length=10,
        choices=Volume.choices,
        default=Volume.MIDDLE,
        help_text="Notification sound volume",
    )
    language = models.CharField(
        max_length=2,
        choices=Language.choices,
        default=Language.ENGLISH,
        help_text="Interface language",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    # Timestamps
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.username

    def get_full_name(self):
        return self.username

    def get_short_name(self):
        return self.username
