"""
Upload services.

This module provides:
- StorageService: Save uploads through Django's default storage

Storage is whatever DEFAULT_FILE_STORAGE / STORAGES["default"] points at:
the filesystem under MEDIA_ROOT locally, any Django storage backend in
production. Callers only ever see the public URL.

Usage:
    from media.services import StorageService

    result = StorageService.upload_image(request.FILES["file"])
    url = result.unwrap()
"""

from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING

from django.core.files.storage import default_storage

from authentication.services import AccountService
from chat.services import GroupChatService
from core.exceptions import ValidationError
from core.services import BaseService, ServiceResult
from media.processors import TRANSFORMS
from media.validators import MediaValidator

if TYPE_CHECKING:
    from django.core.files.uploadedfile import UploadedFile

    from authentication.models import User
    from chat.models import Chatroom


# Storage folders per upload kind
IMAGE_FOLDER = "images"
AUDIO_FOLDER = "audio"
AVATAR_FOLDER = "avatars"
GROUP_IMAGE_FOLDER = "group-images"

TRANSFORMED_EXTENSION = ".webp"


class StorageService(BaseService):
    """Saves uploads and returns their public URL."""

    @classmethod
    def upload(
        cls,
        file: UploadedFile,
        folder: str,
        transform: str | None = None,
    ) -> ServiceResult[str]:
        """
        Store a file under <folder>/<generated name>.

        Args:
            file: Uploaded file
            folder: Storage folder
            transform: Optional image transform ("pad" or "fill")

        Returns:
            ServiceResult with the storage URL

        Error codes:
            INVALID_IMAGE: transform requested for a non-image payload
        """
        result = cls._save(file, folder, transform)
        if not result.success:
            return result
        return ServiceResult.success(default_storage.url(result.data))

    @classmethod
    def _save(
        cls, file: UploadedFile, folder: str, transform: str | None
    ) -> ServiceResult[str]:
        """Store the file and return its storage name."""
        extension = os.path.splitext(file.name or "")[1].lower()
        content = file

        if transform is not None:
            try:
                content = TRANSFORMS[transform](file)
            except ValidationError as e:
                return ServiceResult.from_error(e)
            extension = TRANSFORMED_EXTENSION

        try:
            name = default_storage.save(
                f"{folder}/{uuid.uuid4().hex}{extension}", content
            )
        except OSError as e:
            return cls.handle_exception(e, f"Saving upload to {folder}")

        cls.get_logger().info(f"Stored upload {name}")
        return ServiceResult.success(name)

    @classmethod
    def _validated(cls, file: UploadedFile, kind: str) -> ServiceResult | None:
        result = MediaValidator(kind).validate(file)
        if result.is_valid:
            return None
        return ServiceResult.failure(result.error, error_code=result.error_code)

    @classmethod
    def upload_image(cls, file: UploadedFile) -> ServiceResult[str]:
        """Chat image, padded to 300x300."""
        return cls._validated(file, "image") or cls.upload(file, IMAGE_FOLDER, "pad")

    @classmethod
    def upload_audio(cls, file: UploadedFile) -> ServiceResult[str]:
        """Voice message, stored as-is (audio/* up to 10MB)."""
        return cls._validated(file, "audio") or cls.upload(file, AUDIO_FOLDER)

    @classmethod
    def upload_avatar(cls, user: User, file: UploadedFile) -> ServiceResult[str]:
        """Store a 200x200 avatar and set it on the user."""
        result = cls._validated(file, "image") or cls.upload(file, AVATAR_FOLDER, "fill")
        if not result.success:
            return result

        AccountService.update_settings(user, {"avatar": result.data}).unwrap()
        return result

    @classmethod
    def upload_group_image(
        cls, group: Chatroom, actor: User, file: UploadedFile
    ) -> ServiceResult[str]:
        """
        Store a 200x200 group image and apply it to the group.

        The stored file is deleted again when the group change is refused,
        so a rejected request leaves nothing behind.
        """
        saved = cls._validated(file, "image") or cls._save(
            file, GROUP_IMAGE_FOLDER, "fill"
        )
        if not saved.success:
            return saved

        name = saved.data
        url = default_storage.url(name)
        changed = GroupChatService.change_image(group, actor, url)
        if not changed.success:
            default_storage.delete(name)
            cls.get_logger().info(
                f"Discarded group image {name}: {changed.error_code}"
            )
            return ServiceResult.from_error(changed.exception)
        return ServiceResult.success(url)
