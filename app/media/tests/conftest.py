"""
Test configuration and fixtures for media tests.

Uploads are written to a per-test MEDIA_ROOT under tmp_path.
"""

from io import BytesIO

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.models import MemberRole
from chat.tests.factories import GroupChatFactory, MembershipFactory


def make_image(size=(640, 480), fmt="PNG", mode="RGB", name="photo.png"):
    """Build an in-memory image upload."""
    buffer = BytesIO()
    Image.new(mode, size, color="red").save(buffer, format=fmt)
    return SimpleUploadedFile(name, buffer.getvalue(), content_type=f"image/{fmt.lower()}")


def make_audio(size=1024, content_type="audio/webm", name="voice.webm"):
    """Build an in-memory audio upload of the given byte size."""
    return SimpleUploadedFile(name, b"\x1a" * size, content_type=content_type)


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Store uploads under a temporary MEDIA_ROOT."""
    settings.MEDIA_ROOT = str(tmp_path)
    settings.MEDIA_URL = "/media/"
    return tmp_path


@pytest.fixture
def user(db):
    return UserFactory(username="alice", email="alice@example.com")


@pytest.fixture
def other_user(db):
    return UserFactory(username="carol", email="carol@example.com")


@pytest.fixture
def group(db, user, other_user):
    """Group owned by alice with carol as a plain member."""
    chatroom = GroupChatFactory(creator=user, name="Team")
    MembershipFactory(chatroom=chatroom, user=other_user, role=MemberRole.MEMBER)
    return chatroom


@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def authenticated_client(user):
    return _client_for(user)


@pytest.fixture
def other_client(other_user):
    return _client_for(other_user)
