"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures for the group role hierarchy (owner, admin, member, outsider)
- Chatroom fixtures (direct and group)
- A recorder for realtime events published by the services
- API client helpers for authenticated requests

Usage:
    def test_example(group, owner_client):
        response = owner_client.get(f"/api/v1/chat/chatrooms/{group.id}/")
        assert response.status_code == 200
"""

from unittest.mock import patch

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.models import MemberRole
from chat.tests.factories import DirectChatFactory, GroupChatFactory, MembershipFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def owner_user(db):
    """Group owner."""
    return UserFactory(username="alice", email="alice@example.com")


@pytest.fixture
def admin_user(db):
    """Group admin."""
    return UserFactory(username="bob", email="bob@example.com")


@pytest.fixture
def member_user(db):
    """Plain group member."""
    return UserFactory(username="carol", email="carol@example.com")


@pytest.fixture
def outsider_user(db):
    """User who belongs to none of the fixture chatrooms."""
    return UserFactory(username="dave", email="dave@example.com")


# =============================================================================
# Chatroom Fixtures
# =============================================================================


@pytest.fixture
def group(db, owner_user, admin_user, member_user):
    """
    Group "Team" with owner alice, admin bob and member carol.

    Provides a full role hierarchy for permission testing.
    """
    chatroom = GroupChatFactory(creator=owner_user, name="Team")
    MembershipFactory(chatroom=chatroom, user=admin_user, role=MemberRole.ADMIN)
    MembershipFactory(chatroom=chatroom, user=member_user, role=MemberRole.MEMBER)
    return chatroom


@pytest.fixture
def direct_chat(db, owner_user, member_user):
    """Direct chatroom between alice and carol."""
    return DirectChatFactory(user1=owner_user, user2=member_user)


# =============================================================================
# Realtime Fixtures
# =============================================================================


@pytest.fixture
def published():
    """
    Record events instead of sending them through the channel layer.

    Yields a list of (group, event, payload) tuples.
    """
    events = []

    def record(group_name, event, payload):
        events.append((group_name, event, payload))

    with patch("chat.realtime.publish", side_effect=record):
        yield events


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client_factory(db):
    """
    Factory to create authenticated clients for any user.

    Usage:
        def test_example(authenticated_client_factory, some_user):
            client = authenticated_client_factory(some_user)
            response = client.get("/api/v1/chat/chatrooms/")
    """

    def _make_client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _make_client


@pytest.fixture
def owner_client(authenticated_client_factory, owner_user):
    """API client authenticated as the owner."""
    return authenticated_client_factory(owner_user)


@pytest.fixture
def admin_client(authenticated_client_factory, admin_user):
    """API client authenticated as the admin."""
    return authenticated_client_factory(admin_user)


@pytest.fixture
def member_client(authenticated_client_factory, member_user):
    """API client authenticated as the plain member."""
    return authenticated_client_factory(member_user)


@pytest.fixture
def outsider_client(authenticated_client_factory, outsider_user):
    """API client authenticated as a non-member."""
    return authenticated_client_factory(outsider_user)
