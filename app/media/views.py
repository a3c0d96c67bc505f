"""
API views for chat uploads.

Provides:
- ImageUploadView: Chat image (padded to 300x300)
- AudioUploadView: Voice message (audio/*, up to 10MB)
- AvatarUploadView: Avatar of the current user (200x200)
- GroupImageUploadView: Group image (200x200, owner or admin)

Every view answers {"url": <storage url>}.
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.models import Chatroom
from chat.permissions import IsChatroomAdmin
from media.serializers import UploadResultSerializer, UploadSerializer
from media.services import StorageService


def _upload_schema(operation_id: str, summary: str, description: str):
    return extend_schema(
        operation_id=operation_id,
        summary=summary,
        description=description,
        request={"multipart/form-data": UploadSerializer},
        responses={
            200: UploadResultSerializer,
            400: OpenApiResponse(description="Invalid file type or size"),
            401: OpenApiResponse(description="Authentication required"),
        },
        tags=["Media - Upload"],
    )


class BaseUploadView(APIView):
    """
    Shared request handling for the upload endpoints.

    Subclasses implement store(request, file) returning a ServiceResult
    with the URL.
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request, **kwargs):
        serializer = UploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        url = self.store(request, serializer.validated_data["file"], **kwargs).unwrap()
        return Response({"url": url})

    def store(self, request, file, **kwargs):
        raise NotImplementedError


class ImageUploadView(BaseUploadView):
    """
    POST /api/v1/media/upload/image/

    Store an image for a chat message.
    """

    @_upload_schema(
        "upload_chat_image",
        "Upload chat image",
        "Store an image padded to 300x300. Send the returned URL as message content.",
    )
    def post(self, request, **kwargs):
        return super().post(request, **kwargs)

    def store(self, request, file, **kwargs):
        return StorageService.upload_image(file)


class AudioUploadView(BaseUploadView):
    """
    POST /api/v1/media/upload/audio/

    Store a voice message.
    """

    @_upload_schema(
        "upload_chat_audio",
        "Upload voice message",
        "Store an audio/* file up to 10MB. Send the returned URL as message content.",
    )
    def post(self, request, **kwargs):
        return super().post(request, **kwargs)

    def store(self, request, file, **kwargs):
        return StorageService.upload_audio(file)


class AvatarUploadView(BaseUploadView):
    """
    POST /api/v1/media/upload/avatar/

    Replace the current user's avatar.
    """

    @_upload_schema(
        "upload_avatar",
        "Upload avatar",
        "Store a 200x200 avatar and set it on the current user.",
    )
    def post(self, request, **kwargs):
        return super().post(request, **kwargs)

    def store(self, request, file, **kwargs):
        return StorageService.upload_avatar(request.user, file)


class GroupImageUploadView(BaseUploadView):
    """
    POST /api/v1/media/upload/group-image/{group_id}/

    Replace a group's image. Owner or admin only; posts a system message.
    """

    permission_classes = [IsAuthenticated, IsChatroomAdmin]

    @_upload_schema(
        "upload_group_image",
        "Upload group image",
        "Store a 200x200 group image and apply it to the group (owner or admin).",
    )
    def post(self, request, **kwargs):
        return super().post(request, **kwargs)

    def store(self, request, file, group_id=None, **kwargs):
        group = get_object_or_404(Chatroom, pk=group_id, is_group=True)
        self.check_object_permissions(request, group)
        return StorageService.upload_group_image(group, request.user, file)
