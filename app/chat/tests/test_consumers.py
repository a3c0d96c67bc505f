"""
Tests for the chat WebSocket consumer and its JWT middleware.

Covers:
- Authentication via query string and "jwt" subprotocol
- Close codes for anonymous users, missing chatrooms and non-members
- Forwarding of channel layer events as {"event", "payload"} frames
- Personal channel delivery for list-level events
- Eviction from the room when the user is removed or leaves
- Push-only behaviour for client frames
"""

import pytest
from asgiref.sync import sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from rest_framework_simplejwt.tokens import AccessToken

from chat import realtime
from chat.constants import EVENTS, REALTIME_CONFIG
from chat.middleware import JWTAuthMiddleware
from chat.routing import websocket_urlpatterns
from chat.services import DirectChatService, GroupChatService, MessageService

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]

application = JWTAuthMiddleware(URLRouter(websocket_urlpatterns))


def _token(user) -> str:
    return str(AccessToken.for_user(user))


async def _connect(path, **kwargs):
    communicator = WebsocketCommunicator(application, path, **kwargs)
    connected, code = await communicator.connect()
    return communicator, connected, code


# =============================================================================
# Connection
# =============================================================================


class TestConnect:
    """Tests for ChatConsumer.connect()."""

    async def test_anonymous_is_rejected(self):
        communicator, connected, code = await _connect("/ws/chat/")

        assert connected is False
        assert code == REALTIME_CONFIG.CLOSE_UNAUTHENTICATED

    async def test_invalid_token_is_rejected(self):
        communicator, connected, code = await _connect("/ws/chat/?token=garbage")

        assert connected is False
        assert code == REALTIME_CONFIG.CLOSE_UNAUTHENTICATED

    async def test_personal_connection_with_query_token(self, owner_user):
        communicator, connected, _ = await _connect(
            f"/ws/chat/?token={_token(owner_user)}"
        )

        assert connected is True
        await communicator.disconnect()

    async def test_subprotocol_token_is_accepted(self, owner_user):
        communicator, connected, subprotocol = await _connect(
            "/ws/chat/", subprotocols=["jwt", _token(owner_user)]
        )

        assert connected is True
        assert subprotocol == "jwt"
        await communicator.disconnect()

    async def test_member_joins_room(self, group, member_user):
        communicator, connected, _ = await _connect(
            f"/ws/chat/{group.id}/?token={_token(member_user)}"
        )

        assert connected is True
        await communicator.disconnect()

    async def test_non_member_is_forbidden(self, group, outsider_user):
        communicator, connected, code = await _connect(
            f"/ws/chat/{group.id}/?token={_token(outsider_user)}"
        )

        assert connected is False
        assert code == REALTIME_CONFIG.CLOSE_FORBIDDEN

    async def test_missing_chatroom_is_not_found(self, owner_user):
        communicator, connected, code = await _connect(
            f"/ws/chat/999999/?token={_token(owner_user)}"
        )

        assert connected is False
        assert code == REALTIME_CONFIG.CLOSE_NOT_FOUND


# =============================================================================
# Event delivery
# =============================================================================


class TestEvents:
    """Tests for event forwarding."""

    async def test_room_event_is_forwarded(self, group, member_user):
        communicator, _, _ = await _connect(
            f"/ws/chat/{group.id}/?token={_token(member_user)}"
        )

        await sync_to_async(realtime.publish_to_room)(
            group.id, EVENTS.MESSAGE, {"content": "hi"}
        )

        frame = await communicator.receive_json_from()
        assert frame == {"event": "message", "payload": {"content": "hi"}}
        await communicator.disconnect()

    async def test_personal_event_reaches_only_that_user(self, owner_user, admin_user):
        alice, _, _ = await _connect(f"/ws/chat/?token={_token(owner_user)}")
        bob, _, _ = await _connect(f"/ws/chat/?token={_token(admin_user)}")

        await sync_to_async(realtime.publish_to_users)(
            [owner_user.id], EVENTS.GROUP_MEMBER_ADDED, {"groupId": 3}
        )

        frame = await alice.receive_json_from()
        assert frame["event"] == "group-member-added"
        assert await bob.receive_nothing() is True
        await alice.disconnect()
        await bob.disconnect()

    async def test_new_direct_chat_is_not_broadcast(
        self, owner_user, admin_user, outsider_user
    ):
        bob, _, _ = await _connect(f"/ws/chat/?token={_token(admin_user)}")
        dave, _, _ = await _connect(f"/ws/chat/?token={_token(outsider_user)}")

        await sync_to_async(DirectChatService.create)(owner_user, "bob", "private hello")

        frame = await bob.receive_json_from()
        assert frame["event"] == "message"
        assert frame["payload"]["content"] == "private hello"
        assert await dave.receive_nothing() is True
        await bob.disconnect()
        await dave.disconnect()

    async def test_group_welcome_reaches_creator(self, owner_user):
        alice, _, _ = await _connect(f"/ws/chat/?token={_token(owner_user)}")

        await sync_to_async(GroupChatService.create)(
            owner_user, "Team", "", "welcome!"
        )

        frame = await alice.receive_json_from()
        assert frame["event"] == "message"
        assert frame["payload"]["content"] == "welcome!"
        await alice.disconnect()

    async def test_room_event_does_not_reach_personal_only_connection(self, group, owner_user):
        communicator, _, _ = await _connect(f"/ws/chat/?token={_token(owner_user)}")

        await sync_to_async(realtime.publish_to_room)(group.id, EVENTS.MESSAGE, {})

        assert await communicator.receive_nothing() is True
        await communicator.disconnect()

    async def test_disconnect_leaves_groups(self, group, member_user):
        communicator, _, _ = await _connect(
            f"/ws/chat/{group.id}/?token={_token(member_user)}"
        )
        await communicator.disconnect()

        channel_layer = get_channel_layer()
        assert not channel_layer.groups.get(realtime.room_group(group.id))

    async def test_removed_member_stops_receiving_room_events(
        self, group, owner_user, member_user
    ):
        carol, _, _ = await _connect(f"/ws/chat/{group.id}/?token={_token(member_user)}")
        alice, _, _ = await _connect(f"/ws/chat/{group.id}/?token={_token(owner_user)}")

        await sync_to_async(GroupChatService.remove_member)(group, owner_user, "carol")

        system = await carol.receive_json_from()
        removed = await carol.receive_json_from()
        assert system["event"] == "message"
        assert removed == {
            "event": "member-removed",
            "payload": {"groupId": group.id, "removedUser": "carol", "removedBy": "alice"},
        }
        closed = await carol.receive_output()
        assert closed["type"] == "websocket.close"
        assert closed["code"] == REALTIME_CONFIG.CLOSE_FORBIDDEN

        await sync_to_async(MessageService.send)(group, owner_user, "after removal")

        assert await carol.receive_nothing() is True
        events = [(await alice.receive_json_from())["event"] for _ in range(3)]
        assert events == ["message", "member-removed", "message"]
        await carol.disconnect()
        await alice.disconnect()

    async def test_member_who_leaves_is_evicted(self, group, member_user):
        carol, _, _ = await _connect(f"/ws/chat/{group.id}/?token={_token(member_user)}")

        await sync_to_async(GroupChatService.leave)(group, member_user)

        await carol.receive_json_from()
        left = await carol.receive_json_from()
        assert left["event"] == "member-left"
        closed = await carol.receive_output()
        assert closed["code"] == REALTIME_CONFIG.CLOSE_FORBIDDEN

        channel_layer = get_channel_layer()
        assert not channel_layer.groups.get(realtime.room_group(group.id))
        await carol.disconnect()

    async def test_other_members_removal_keeps_connection(
        self, group, owner_user, admin_user
    ):
        bob, _, _ = await _connect(f"/ws/chat/{group.id}/?token={_token(admin_user)}")

        await sync_to_async(GroupChatService.remove_member)(group, owner_user, "carol")
        await bob.receive_json_from()
        await bob.receive_json_from()

        assert await bob.receive_nothing() is True
        await sync_to_async(MessageService.send)(group, owner_user, "still here")
        frame = await bob.receive_json_from()
        assert frame["payload"]["content"] == "still here"
        await bob.disconnect()

    async def test_client_frames_get_error_reply(self, owner_user):
        communicator, _, _ = await _connect(f"/ws/chat/?token={_token(owner_user)}")

        await communicator.send_json_to({"content": "hello"})

        frame = await communicator.receive_json_from()
        assert frame["event"] == "error"
        await communicator.disconnect()
