"""
Serializers for media uploads.

Provides:
- UploadSerializer: Multipart request with a single "file" field
- UploadResultSerializer: {"url"} response
"""

from rest_framework import serializers


class UploadSerializer(serializers.Serializer):
    """
    Serializer for a single-file upload.

    Type and size rules depend on the endpoint and are enforced by
    StorageService through media.validators.
    """

    file = serializers.FileField()


class UploadResultSerializer(serializers.Serializer):
    """URL of the stored file."""

    url = serializers.CharField(read_only=True)
