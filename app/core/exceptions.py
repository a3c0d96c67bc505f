"""
Application error taxonomy and the DRF exception handler that renders it.

Every business-rule violation in the service layer is expressed as one of the
classes below. Each class carries the HTTP status it maps to, so views never
pick status codes for domain errors themselves.

Exception Hierarchy:
    BaseApplicationError (base, 500)
    ├── UnauthenticatedError - No valid identity (401)
    ├── ValidationError - Field length/emptiness/format violations (400)
    ├── PermissionDeniedError - Missing role or relationship (403)
    ├── NotFoundError - Referenced user/chatroom/message does not exist (404)
    ├── ConflictError - Duplicates and already-applied state (409)
    └── InternalError - Storage or unexpected failures (500)

Usage:
    from core.exceptions import NotFoundError

    raise NotFoundError("Group chat not found", error_code="GROUP_NOT_FOUND")

    # Rendered by api_exception_handler as
    # 404 {"error": "Group chat not found", "error_code": "GROUP_NOT_FOUND"}

Related:
    - core.services.ServiceResult.from_error: carries these through services
    - config.settings REST_FRAMEWORK["EXCEPTION_HANDLER"]
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, ids, etc.)
        status_code: HTTP status used when rendered by the API
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "User not found",
                "error_code": "USER_NOT_FOUND",
                "details": {"username": "ghost"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class UnauthenticatedError(BaseApplicationError):
    """
    Raised when no valid identity is attached to the request.

    REST requests normally never reach business logic without a user, since
    DRF's IsAuthenticated gate rejects them first. This class exists for
    code paths outside DRF (WebSocket consumers, background jobs) that need
    to signal the same condition.
    """

    default_error_code: str = "NOT_AUTHENTICATED"
    status_code: int = status.HTTP_401_UNAUTHORIZED


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Empty or over-long group names and descriptions
    - Empty invite lists and empty message content
    - Operations that do not apply to the target (e.g. a direct chat passed
      to a group-only operation)

    Example:
        raise ValidationError(
            "Group name too long (max 50 characters)",
            error_code="GROUP_NAME_TOO_LONG",
        )
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST


class NotFoundError(BaseApplicationError):
    """
    Raised when a referenced user, chatroom, group or message does not exist.

    Example:
        raise NotFoundError("User not found", error_code="USER_NOT_FOUND")
    """

    default_error_code: str = "NOT_FOUND"
    status_code: int = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when an authenticated user lacks the role or relationship required.

    Use for:
    - Not a member of the chatroom
    - Not the sender of the message
    - Not an admin / not the owner of the group
    - Self-targeting where it is disallowed (direct chat with yourself)
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = status.HTTP_403_FORBIDDEN


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current state.

    Use for:
    - Duplicate group names (including unique constraint violations)
    - A direct chat that already exists for a pair
    - Promoting an existing admin, inviting only existing members
    """

    default_error_code: str = "CONFLICT"
    status_code: int = status.HTTP_409_CONFLICT


class InternalError(BaseApplicationError):
    """
    Raised for storage failures and other unexpected conditions.

    The message shown to clients is always generic; the original error is
    logged where it is caught.
    """

    default_error_code: str = "INTERNAL_ERROR"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR


# DRF's own exceptions are reshaped into the same {"error", "error_code"} body.
DRF_ERROR_CODES: dict[type[drf_exceptions.APIException], str] = {
    drf_exceptions.NotAuthenticated: "NOT_AUTHENTICATED",
    drf_exceptions.AuthenticationFailed: "NOT_AUTHENTICATED",
    drf_exceptions.PermissionDenied: "PERMISSION_DENIED",
    drf_exceptions.NotFound: "NOT_FOUND",
    drf_exceptions.ValidationError: "VALIDATION_ERROR",
    drf_exceptions.MethodNotAllowed: "METHOD_NOT_ALLOWED",
    drf_exceptions.ParseError: "PARSE_ERROR",
    drf_exceptions.UnsupportedMediaType: "UNSUPPORTED_MEDIA_TYPE",
}


def _drf_error_code(exc: Exception) -> str:
    for exc_class, code in DRF_ERROR_CODES.items():
        if isinstance(exc, exc_class):
            return code
    return "API_ERROR"


def api_exception_handler(exc: Exception, context: dict) -> Response:
    """
    Render every error raised inside a DRF view with the same body shape.

    - BaseApplicationError: its own status and to_dict() body
    - DRF/Django API errors: DRF's status, detail folded into "error"
      (serializer field errors go to "details")
    - Anything else: logged with traceback, generic 500 body
    """
    if isinstance(exc, BaseApplicationError):
        if exc.status_code >= 500:
            logger.error(f"Internal error in {context.get('view')}: {exc!r}")
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        body: dict[str, Any] = {"error_code": _drf_error_code(exc)}
        detail = response.data
        if isinstance(detail, dict) and set(detail) == {"detail"}:
            body["error"] = str(detail["detail"])
        elif isinstance(exc, drf_exceptions.ValidationError):
            body["error"] = "Validation failed"
            body["details"] = detail
        else:
            body["error"] = str(detail)
        response.data = body
        return response

    logger.exception(f"Unhandled error in {context.get('view')}")
    return Response(
        InternalError("Internal server error").to_dict(),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
