"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Failures:
    A failed ServiceResult carries a typed error from core.exceptions. Views
    call result.unwrap(), which returns the data or raises that error; the
    DRF exception handler turns it into the right status code.

Usage:
    from core.exceptions import ConflictError
    from core.services import BaseService, ServiceResult

    class GroupChatService(BaseService):
        @classmethod
        def create(cls, creator, name) -> ServiceResult[Chatroom]:
            if Chatroom.objects.filter(is_group=True, name=name).exists():
                return ServiceResult.from_error(
                    ConflictError("A group with this name already exists",
                                  error_code="GROUP_EXISTS")
                )

            with cls.atomic():
                chatroom = Chatroom.objects.create(is_group=True, name=name)

            cls.get_logger().info(f"Created group {chatroom.id}")
            return ServiceResult.success(chatroom)

    # In view
    chatroom = GroupChatService.create(request.user, name).unwrap()
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError, InternalError, ValidationError

if TYPE_CHECKING:
    from collections.abc import Generator

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures
        exception: Typed application error describing the failure

    Usage:
        # Success case
        return ServiceResult.success(chatroom)

        # Failure case
        return ServiceResult.from_error(
            PermissionDeniedError("Only admins can invite users")
        )

        # Check result
        result = GroupChatService.invite(group, actor, ["bob"])
        if result:
            invited = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)
    exception: BaseApplicationError | None = field(default=None, repr=False)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """Create a successful result."""
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result that is a validation failure.

        Prefer from_error() when the failure is not a validation problem,
        so the caller gets the right error kind.
        """
        return cls.from_error(
            ValidationError(error, error_code=error_code, details=errors)
        )

    @classmethod
    def from_error(cls, exc: BaseApplicationError) -> ServiceResult[T]:
        """
        Create a failed result from a typed application error.

        Example:
            return ServiceResult.from_error(
                NotFoundError("Message not found", error_code="MESSAGE_NOT_FOUND")
            )
        """
        return cls(
            success=False,
            error=exc.message,
            error_code=exc.error_code,
            errors=exc.details or None,
            exception=exc,
        )

    @classmethod
    def from_exception(
        cls, exc: Exception, error_code: str | None = None
    ) -> ServiceResult[T]:
        """
        Create a failed result from an arbitrary exception.

        Application errors keep their kind; anything else becomes an
        InternalError with a generic message.
        """
        if isinstance(exc, BaseApplicationError):
            return cls.from_error(exc)
        return cls.from_error(
            InternalError(
                "Internal server error",
                error_code=error_code or exc.__class__.__name__.upper(),
            )
        )

    def unwrap(self) -> T:
        """
        Return the data, or raise the carried error if the result failed.

        Example:
            chatroom = DirectChatService.create(user, "bob", "hi").unwrap()
        """
        if self.success:
            return self.data  # type: ignore[return-value]
        if self.exception is not None:
            raise self.exception
        raise InternalError(self.error or "Internal server error", self.error_code)

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception handling patterns

    Design Notes:
        - Use @classmethod (no instance state)
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around Django's transaction.atomic() that makes
        transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield

    @classmethod
    def on_commit(cls, func) -> None:
        """
        Run func once the surrounding transaction commits.

        Outside a transaction (autocommit) func runs immediately.
        """
        transaction.on_commit(func)

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Convert exception to ServiceResult with logging.

        Example:
            try:
                default_storage.save(name, content)
            except OSError as e:
                return cls.handle_exception(e, "saving upload")
        """
        message = f"{context}: {exc}" if context else str(exc)
        cls.get_logger().log(log_level, message, exc_info=True)
        return ServiceResult.from_exception(exc)

