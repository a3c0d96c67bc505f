"""
Image transforms for uploaded pictures.

Uses Pillow for image manipulation with proper error handling for:
- Corrupted image files
- Unsupported formats
- Images exceeding Pillow's decompression bomb limit

All transformed images are saved as WebP for web delivery.

Functions:
    pad_image: Fit into 300x300 and pad the remaining area (chat images)
    fill_image: Scale and centre-crop to 200x200 (group images, avatars)
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import BinaryIO, Callable

from django.core.files.base import ContentFile
from PIL import Image, ImageOps

from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

PAD_SIZE = (300, 300)
FILL_SIZE = (200, 200)

PAD_COLOR = (255, 255, 255)

WEBP_QUALITY = 80


# =============================================================================
# Exceptions
# =============================================================================


class ImageProcessingError(ValidationError):
    """
    Raised when an upload cannot be read as an image.

    Covers corrupted files, unsupported formats and decompression bombs.
    Rendered as 400 by the API exception handler.
    """

    default_error_code = "INVALID_IMAGE"


# =============================================================================
# Transforms
# =============================================================================


def pad_image(source: BinaryIO) -> ContentFile:
    """
    Fit an image into PAD_SIZE keeping its aspect ratio, padding the rest.

    Args:
        source: File-like object holding the uploaded image

    Returns:
        ContentFile with the WebP encoded result
    """
    img = _open(source)
    img = ImageOps.pad(img, PAD_SIZE, Image.Resampling.LANCZOS, color=PAD_COLOR)
    return _encode(img)


def fill_image(source: BinaryIO) -> ContentFile:
    """
    Scale an image to cover FILL_SIZE and crop it around the centre.

    Args:
        source: File-like object holding the uploaded image

    Returns:
        ContentFile with the WebP encoded result
    """
    img = _open(source)
    img = ImageOps.fit(img, FILL_SIZE, Image.Resampling.LANCZOS, centering=(0.5, 0.5))
    return _encode(img)


TRANSFORMS: dict[str, Callable[[BinaryIO], ContentFile]] = {
    "pad": pad_image,
    "fill": fill_image,
}


def _open(source: BinaryIO) -> Image.Image:
    """Load an image fully so corrupt files fail here and not on save."""
    if hasattr(source, "seek"):
        source.seek(0)

    try:
        img = Image.open(source)
        img.load()
    except Image.DecompressionBombError as e:
        logger.warning(f"Image exceeds size limit: {e}")
        raise ImageProcessingError("Image exceeds maximum size limit") from e
    except Image.UnidentifiedImageError as e:
        logger.warning(f"Cannot identify image format: {e}")
        raise ImageProcessingError("Uploaded file is not a valid image") from e
    except OSError as e:
        logger.warning(f"Image file is truncated or corrupted: {e}")
        raise ImageProcessingError("Image file is truncated or corrupted") from e

    img = ImageOps.exif_transpose(img)
    return _convert_to_rgb(img)


def _encode(img: Image.Image) -> ContentFile:
    buffer = BytesIO()
    img.save(buffer, format="WEBP", quality=WEBP_QUALITY)
    return ContentFile(buffer.getvalue())


def _convert_to_rgb(img: Image.Image) -> Image.Image:
    """
    Convert image to RGB mode for WebP encoding.

    Transparent areas are composited onto a white background.
    """
    if img.mode == "RGB":
        return img

    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        img = img.convert("RGBA")
        background = Image.new("RGB", img.size, PAD_COLOR)
        background.paste(img, mask=img.split()[-1])
        return background

    return img.convert("RGB")
