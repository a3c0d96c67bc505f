"""
Tests for media upload endpoints.
"""

from rest_framework import status

from media.tests.conftest import make_audio, make_image

BASE = "/api/v1/media/upload"


class TestUploadEndpoints:
    def test_anonymous_is_rejected(self, db, api_client):
        response = api_client.post(f"{BASE}/image/", {"file": make_image()})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_image(self, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/image/", {"file": make_image()}, format="multipart"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["url"].startswith("/media/images/")

    def test_missing_file_is_400(self, authenticated_client):
        response = authenticated_client.post(f"{BASE}/image/", {}, format="multipart")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_audio(self, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/audio/", {"file": make_audio()}, format="multipart"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["url"].startswith("/media/audio/")

    def test_audio_wrong_type_is_400(self, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/audio/", {"file": make_image()}, format="multipart"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_FILE_TYPE"

    def test_avatar(self, authenticated_client, user):
        response = authenticated_client.post(
            f"{BASE}/avatar/", {"file": make_image()}, format="multipart"
        )

        user.refresh_from_db()
        assert response.status_code == status.HTTP_200_OK
        assert user.avatar == response.data["url"]

    def test_group_image(self, authenticated_client, group):
        response = authenticated_client.post(
            f"{BASE}/group-image/{group.id}/", {"file": make_image()}, format="multipart"
        )

        group.refresh_from_db()
        assert response.status_code == status.HTTP_200_OK
        assert group.image == response.data["url"]

    def test_group_image_by_member_is_403(self, other_client, group):
        response = other_client.post(
            f"{BASE}/group-image/{group.id}/", {"file": make_image()}, format="multipart"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_group_image_for_missing_group_is_404(self, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/group-image/999999/", {"file": make_image()}, format="multipart"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
