"""
Upload validators.

Checks the declared MIME type and size of an upload against the rules of
its kind (image or audio). The declared type comes from the multipart
Content-Type; when it is missing the file name decides.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass

from django.core.files.uploadedfile import UploadedFile


# =============================================================================
# Configuration
# =============================================================================

ALLOWED_MIME_PREFIXES: dict[str, str] = {
    "image": "image/",
    "audio": "audio/",
}

SIZE_LIMITS: dict[str, int] = {
    "image": 25 * 1024 * 1024,  # 25MB
    "audio": 10 * 1024 * 1024,  # 10MB
}


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ValidationResult:
    """Result of upload validation.

    Attributes:
        is_valid: Whether the file passed validation.
        mime_type: Declared MIME type of the file.
        error: Human-readable error message if validation failed.
        error_code: Machine-readable error code if validation failed.
    """

    is_valid: bool
    mime_type: str | None = None
    error: str | None = None
    error_code: str | None = None


# =============================================================================
# Validator Class
# =============================================================================


class MediaValidator:
    """Validates uploads of one kind.

    Example:
        result = MediaValidator("audio").validate(uploaded_file)
        if not result.is_valid:
            print(f"Validation failed: {result.error}")
    """

    def __init__(self, kind: str, size_limit: int | None = None) -> None:
        if kind not in ALLOWED_MIME_PREFIXES:
            raise ValueError(f"Unknown upload kind: {kind}")
        self.kind = kind
        self.size_limit = size_limit or SIZE_LIMITS[kind]

    def validate(self, file: UploadedFile) -> ValidationResult:
        """Validate an upload.

        Performs the following checks in order:
        1. Empty file check
        2. MIME type check against the kind's prefix
        3. File size limit check
        """
        if not file.size:
            return ValidationResult(
                is_valid=False,
                error="File is empty",
                error_code="EMPTY_FILE",
            )

        mime_type = self._declared_mime_type(file)
        if not mime_type or not mime_type.startswith(ALLOWED_MIME_PREFIXES[self.kind]):
            return ValidationResult(
                is_valid=False,
                mime_type=mime_type,
                error=f"Only {self.kind} files are allowed",
                error_code="INVALID_FILE_TYPE",
            )

        if file.size > self.size_limit:
            limit_mb = self.size_limit // (1024 * 1024)
            return ValidationResult(
                is_valid=False,
                mime_type=mime_type,
                error=f"File too large (max {limit_mb}MB)",
                error_code="FILE_TOO_LARGE",
            )

        return ValidationResult(is_valid=True, mime_type=mime_type)

    @staticmethod
    def _declared_mime_type(file: UploadedFile) -> str | None:
        content_type = getattr(file, "content_type", None)
        if content_type and content_type != "application/octet-stream":
            return content_type
        guessed, _ = mimetypes.guess_type(file.name or "")
        return guessed
