"""
URL configuration for media app.

API Documentation Groups (following [App Name] - [Group Name] pattern):

Media - Upload:
    POST /upload/image/                       - Chat image
    POST /upload/audio/                       - Voice message
    POST /upload/avatar/                      - Current user's avatar
    POST /upload/group-image/{group_id}/      - Group image
"""

from django.urls import path

from media.views import (
    AudioUploadView,
    AvatarUploadView,
    GroupImageUploadView,
    ImageUploadView,
)

app_name = "media"

urlpatterns = [
    path("upload/image/", ImageUploadView.as_view(), name="upload-image"),
    path("upload/audio/", AudioUploadView.as_view(), name="upload-audio"),
    path("upload/avatar/", AvatarUploadView.as_view(), name="upload-avatar"),
    path(
        "upload/group-image/<int:group_id>/",
        GroupImageUploadView.as_view(),
        name="upload-group-image",
    ),
]
