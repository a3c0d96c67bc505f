"""
Celery tasks for authentication.

This module defines async tasks for:
- Sending verification keys
- Sending password reset keys

Usage:
    from authentication.tasks import send_verification_email
    send_verification_email.delay(user_id=123)
"""

import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(ConnectionError, TimeoutError),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def send_verification_email(self, user_id: int) -> bool:
    """
    Email the account verification key to the user.

    Returns:
        True if the email was sent, False if there was nothing to send
    """
    from authentication.models import User

    user = User.objects.filter(id=user_id).first()
    if user is None:
        logger.error(f"User {user_id} not found for verification email")
        return False
    if user.is_verified:
        logger.info(f"User {user_id} already verified, skipping email")
        return False

    send_mail(
        subject="Verify your account",
        message=(
            f"Hi {user.username},\n\n"
            f"your verification key is {user.verification_key}.\n"
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
    )

    logger.info(f"Verification email sent to user {user_id}")
    return True


@shared_task(
    bind=True,
    autoretry_for=(ConnectionError, TimeoutError),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def send_password_reset_email(self, user_id: int) -> bool:
    """
    Email the pending password reset key to the user.

    Returns:
        True if the email was sent, False if no key is pending
    """
    from authentication.models import User

    user = User.objects.filter(id=user_id).first()
    if user is None or not user.reset_key:
        logger.error(f"No pending reset key for user {user_id}")
        return False

    send_mail(
        subject="Reset your password",
        message=(
            f"Hi {user.username},\n\n"
            f"use the key {user.reset_key} to choose a new password.\n"
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
    )

    logger.info(f"Password reset email sent to user {user_id}")
    return True
