"""
Tests for chat REST API endpoints.

Covers routing, status codes and error bodies of:
- /api/v1/chat/direct/...
- /api/v1/chat/chatrooms/...
- /api/v1/chat/groups/...
- /api/v1/chat/messages/...

Business rules are tested in test_services.py; these tests check that views
wire input, services and error rendering together.
"""

import pytest
from rest_framework import status

from chat.models import Chatroom, MemberRole, Message
from chat.tests.factories import MessageFactory

BASE = "/api/v1/chat"


# =============================================================================
# Authentication
# =============================================================================


class TestAuthenticationRequired:
    """Every chat endpoint rejects anonymous requests with 401."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/chatrooms/"),
            ("post", "/direct/exist/"),
            ("post", "/groups/"),
            ("post", "/messages/"),
        ],
    )
    def test_anonymous_is_unauthenticated(self, db, api_client, method, path):
        response = getattr(api_client, method)(f"{BASE}{path}", {}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error_code"] == "NOT_AUTHENTICATED"


# =============================================================================
# Direct chats
# =============================================================================


class TestDirectChatEndpoints:
    """Tests for /direct/ endpoints."""

    def test_exist_returns_preview(self, db, owner_client, outsider_user):
        response = owner_client.post(
            f"{BASE}/direct/exist/", {"username": "dave"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["chatroom"] == "new-chatroom"
        assert response.data["partnerName"] == "dave"

    def test_exist_returns_existing_id(self, db, owner_client, direct_chat):
        response = owner_client.post(
            f"{BASE}/direct/exist/", {"username": "carol"}, format="json"
        )

        assert response.data == {"chatroom": direct_chat.id}

    def test_exist_unknown_user_is_404(self, db, owner_client):
        response = owner_client.post(
            f"{BASE}/direct/exist/", {"username": "nobody"}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {"error": "User not found", "error_code": "USER_NOT_FOUND"}

    def test_self_chat_is_403(self, db, owner_client, owner_user):
        response = owner_client.post(
            f"{BASE}/direct/",
            {"partner_username": "alice", "content": "hi"},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "SELF_CHAT"

    def test_create(self, db, owner_client, outsider_user):
        response = owner_client.post(
            f"{BASE}/direct/",
            {"partner_username": "dave", "content": "Hi Dave"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        chatroom = Chatroom.objects.get(pk=response.data["chatroom"])
        assert chatroom.messages.get().content == "Hi Dave"

    def test_create_duplicate_is_409(self, db, owner_client, direct_chat):
        response = owner_client.post(
            f"{BASE}/direct/",
            {"partner_username": "carol", "content": "again"},
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "DIRECT_CHAT_EXISTS"

    def test_create_with_empty_content_is_400(self, db, owner_client, outsider_user):
        response = owner_client.post(
            f"{BASE}/direct/",
            {"partner_username": "dave", "content": ""},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "CONTENT_REQUIRED"

    def test_delete(self, db, member_client, direct_chat):
        response = member_client.delete(f"{BASE}/direct/{direct_chat.id}/")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Chatroom.objects.filter(pk=direct_chat.pk).exists()

    def test_delete_group_through_direct_endpoint_is_400(self, db, owner_client, group):
        response = owner_client.delete(f"{BASE}/direct/{group.id}/")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "NOT_DIRECT_CHAT"


# =============================================================================
# Chatrooms
# =============================================================================


class TestChatroomEndpoints:
    """Tests for /chatrooms/ endpoints."""

    def test_list(self, db, owner_client, group, direct_chat):
        response = owner_client.get(f"{BASE}/chatrooms/")

        assert response.status_code == status.HTTP_200_OK
        assert {c["chatId"] for c in response.data["chatrooms"]} == {
            group.id,
            direct_chat.id,
        }
        assert response.data["currentUsername"] == "alice"

    def test_detail(self, db, member_client, group, owner_user):
        MessageFactory(chatroom=group, sender=owner_user, content="hello")

        response = member_client.get(f"{BASE}/chatrooms/{group.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["chatroomMessages"][0]["content"] == "hello"
        assert response.data["unreadMessagesCount"] == 1

    def test_detail_for_non_member_is_403(self, db, outsider_client, group):
        response = outsider_client.get(f"{BASE}/chatrooms/{group.id}/")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "PERMISSION_DENIED"

    def test_detail_missing_is_404(self, db, owner_client):
        response = owner_client.get(f"{BASE}/chatrooms/999999/")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_mark_read(self, db, member_client, group, owner_user, member_user):
        MessageFactory(chatroom=group, sender=owner_user)

        response = member_client.post(f"{BASE}/chatrooms/{group.id}/read/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["message"] == "Successfully updated"
        assert "now" in response.data
        detail = member_client.get(f"{BASE}/chatrooms/{group.id}/")
        assert detail.data["unreadMessagesCount"] == 0


# =============================================================================
# Groups
# =============================================================================


class TestGroupEndpoints:
    """Tests for /groups/ endpoints."""

    def test_create(self, db, owner_client):
        response = owner_client.post(
            f"{BASE}/groups/",
            {"name": "Team", "description": "Ours", "welcome_message": "Hi!"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        group = Chatroom.objects.get(pk=response.data["chatroom"])
        assert group.name == "Team"
        assert group.messages.get().content == "Hi!"

    def test_create_duplicate_is_409(self, db, outsider_client, group):
        response = outsider_client.post(
            f"{BASE}/groups/", {"name": "Team"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "GROUP_EXISTS"

    def test_create_without_name_is_400(self, db, owner_client):
        response = owner_client.post(f"{BASE}/groups/", {"name": "  "}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "NAME_REQUIRED"

    def test_edit_metadata(self, db, admin_client, group):
        response = admin_client.patch(
            f"{BASE}/groups/{group.id}/", {"name": "Crew"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["updates"] == {"name": "Crew"}

    def test_edit_metadata_no_changes_is_400(self, db, admin_client, group):
        response = admin_client.patch(
            f"{BASE}/groups/{group.id}/", {"name": "Team"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"] == "No changes to update"

    def test_members(self, db, member_client, group):
        response = member_client.get(f"{BASE}/groups/{group.id}/members/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["memberCount"] == 3
        assert response.data["userPermissions"]["isAdmin"] is False

    def test_members_for_non_member_is_403(self, db, outsider_client, group):
        response = outsider_client.get(f"{BASE}/groups/{group.id}/members/")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_invite(self, db, owner_client, group, outsider_user):
        response = owner_client.post(
            f"{BASE}/groups/{group.id}/invite/", {"usernames": ["dave"]}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["newMembers"] == ["dave"]
        assert group.has_member(outsider_user)

    def test_invite_empty_list_is_400(self, db, owner_client, group):
        response = owner_client.post(
            f"{BASE}/groups/{group.id}/invite/", {"usernames": []}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_invite_by_member_is_403(self, db, member_client, group, outsider_user):
        response = member_client.post(
            f"{BASE}/groups/{group.id}/invite/", {"usernames": ["dave"]}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_promote_and_demote(self, db, owner_client, group, member_user):
        response = owner_client.patch(
            f"{BASE}/groups/{group.id}/promote/", {"username": "carol"}, format="json"
        )
        assert response.status_code == status.HTTP_200_OK
        assert group.membership_for(member_user).role == MemberRole.ADMIN

        response = owner_client.patch(
            f"{BASE}/groups/{group.id}/demote/", {"username": "carol"}, format="json"
        )
        assert response.status_code == status.HTTP_200_OK
        assert group.membership_for(member_user).role == MemberRole.MEMBER

    def test_demote_by_admin_is_403(self, db, admin_client, group):
        response = admin_client.patch(
            f"{BASE}/groups/{group.id}/demote/", {"username": "bob"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_remove_member(self, db, admin_client, group, member_user):
        response = admin_client.delete(f"{BASE}/groups/{group.id}/members/carol/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["removedUser"] == "carol"
        assert not group.has_member(member_user)

    def test_remove_owner_is_403(self, db, admin_client, group):
        response = admin_client.delete(f"{BASE}/groups/{group.id}/members/alice/")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "CANNOT_REMOVE_OWNER"

    def test_leave(self, db, member_client, group, member_user):
        response = member_client.post(f"{BASE}/groups/{group.id}/leave/")

        assert response.status_code == status.HTTP_200_OK
        assert not group.has_member(member_user)

    def test_owner_leave_is_403(self, db, owner_client, group):
        response = owner_client.post(f"{BASE}/groups/{group.id}/leave/")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "OWNER_CANNOT_LEAVE"

    def test_delete(self, db, owner_client, group):
        response = owner_client.delete(f"{BASE}/groups/{group.id}/")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Chatroom.objects.filter(pk=group.pk).exists()

    def test_delete_by_admin_is_403(self, db, admin_client, group):
        response = admin_client.delete(f"{BASE}/groups/{group.id}/")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_direct_chat_is_not_a_group(self, db, owner_client, direct_chat):
        response = owner_client.get(f"{BASE}/groups/{direct_chat.id}/members/")

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Messages
# =============================================================================


class TestMessageEndpoints:
    """Tests for /messages/ endpoints."""

    def test_send(self, db, member_client, group):
        response = member_client.post(
            f"{BASE}/messages/", {"chatroom": group.id, "content": "Hi"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["content"] == "Hi"
        assert response.data["sender"]["username"] == "carol"
        assert response.data["isEdited"] is False

    def test_send_to_missing_chatroom_is_404(self, db, member_client):
        response = member_client.post(
            f"{BASE}/messages/", {"chatroom": 999999, "content": "Hi"}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_send_as_non_member_is_403(self, db, outsider_client, group):
        response = outsider_client.post(
            f"{BASE}/messages/", {"chatroom": group.id, "content": "Hi"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "NOT_MEMBER"

    def test_edit(self, db, member_client, group, member_user):
        message = MessageFactory(chatroom=group, sender=member_user)

        response = member_client.patch(
            f"{BASE}/messages/{message.id}/", {"content": "fixed"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["updatedMessage"]["content"] == "fixed"
        assert response.data["updatedMessage"]["isEdited"] is True

    def test_edit_someone_else_is_403(self, db, owner_client, group, member_user):
        message = MessageFactory(chatroom=group, sender=member_user)

        response = owner_client.patch(
            f"{BASE}/messages/{message.id}/", {"content": "mine"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"] == "You can only edit your own messages"

    def test_delete(self, db, owner_client, group, member_user):
        message = MessageFactory(chatroom=group, sender=member_user)

        response = owner_client.delete(f"{BASE}/messages/{message.id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["deletedMessage"]["id"] == message.id
        assert not Message.objects.filter(pk=message.pk).exists()

    def test_admin_deleting_owner_message_is_403(
        self, db, admin_client, group, owner_user
    ):
        message = MessageFactory(chatroom=group, sender=owner_user)

        response = admin_client.delete(f"{BASE}/messages/{message.id}/")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_edit_seen(self, db, member_client, group, owner_user, member_user):
        message = MessageFactory(chatroom=group, sender=owner_user)

        response = member_client.post(f"{BASE}/messages/{message.id}/edit-seen/")

        assert response.status_code == status.HTTP_200_OK
        assert [u["username"] for u in response.data["updatedMessage"]["editSeenBy"]] == [
            "carol"
        ]
