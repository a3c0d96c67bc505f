"""
Media processors package.

Provides image transforms applied before an upload is stored:
- pad: Fit inside a box and pad the rest (chat images)
- fill: Scale and centre-crop to the box (group images, avatars)

Usage:
    from media.processors import TRANSFORMS, ImageProcessingError

    content = TRANSFORMS["pad"](uploaded_file)
"""

from media.processors.image import (
    FILL_SIZE,
    PAD_SIZE,
    TRANSFORMS,
    ImageProcessingError,
    fill_image,
    pad_image,
)

__all__ = [
    "FILL_SIZE",
    "PAD_SIZE",
    "TRANSFORMS",
    "ImageProcessingError",
    "fill_image",
    "pad_image",
]
