"""
WebSocket consumers for the chat application.

Consumers:
    ChatConsumer: Delivers chat events to connected clients

Authentication:
    Users are authenticated by JWTAuthMiddleware, which attaches the user
    (or AnonymousUser) to self.scope["user"].

Channel Groups:
    Every connection joins the user's personal "chat_user_<user_id>" group
    for list-level events. Connections to ws/chat/<chatroom_id>/ also join
    "chat_<chatroom_id>" after a membership check, and leave it again when
    a member-removed or member-left event names the connected user.

Frames (to client):
    {"event": <event name>, "payload": <payload>}

Close codes:
    4001: Not authenticated
    4003: Not a member of the chatroom (also when removed while connected)
    4004: Chatroom does not exist
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from chat.authorization import role_of
from chat.constants import EVENTS, REALTIME_CONFIG
from chat.models import Chatroom
from chat.realtime import room_group, user_group

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer forwarding chat events.

    Events are produced by the service layer through chat.realtime and
    arrive here as "chat.event" channel layer messages. The consumer is
    push-only; mutations go through the REST API.

    Attributes:
        chatroom_id: Id of the joined chatroom (None for personal-only)
        groups_joined: Channel layer groups this connection belongs to
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.chatroom_id: int | None = None
        self.groups_joined: list[str] = []

    async def connect(self):
        """
        Handle WebSocket connection.

        Validates:
            1. User is authenticated
            2. Chatroom exists (room connections)
            3. User is a member of the chatroom (room connections)

        On success, joins the channel groups and accepts the connection.
        """
        self.chatroom_id = self.scope["url_route"]["kwargs"].get("chatroom_id")
        user = self.scope.get("user")

        if user is None or not user.is_authenticated:
            logger.warning("Rejected unauthenticated WebSocket connection")
            await self.close(code=REALTIME_CONFIG.CLOSE_UNAUTHENTICATED)
            return

        groups = [user_group(user.id)]

        if self.chatroom_id is not None:
            chatroom = await self._get_chatroom()
            if chatroom is None:
                logger.warning(
                    f"User {user.id} tried to connect to non-existent "
                    f"chatroom {self.chatroom_id}"
                )
                await self.close(code=REALTIME_CONFIG.CLOSE_NOT_FOUND)
                return

            if not await self._is_member(chatroom, user):
                logger.warning(
                    f"User {user.id} is not a member of chatroom {self.chatroom_id}"
                )
                await self.close(code=REALTIME_CONFIG.CLOSE_FORBIDDEN)
                return

            groups.append(room_group(self.chatroom_id))

        for group in groups:
            await self.channel_layer.group_add(group, self.channel_name)
        self.groups_joined = groups

        await self.accept(subprotocol=self.scope.get("accepted_subprotocol"))
        logger.info(f"User {user.id} connected to {', '.join(groups)}")

    async def disconnect(self, close_code):
        """Leave every channel group joined on connect."""
        for group in self.groups_joined:
            await self.channel_layer.group_discard(group, self.channel_name)

        if self.groups_joined:
            user = self.scope.get("user")
            logger.info(f"User {user.id} disconnected ({close_code})")
        self.groups_joined = []

    async def receive_json(self, content, **kwargs):
        """Clients only listen; anything they send is answered with an error."""
        await self.send_json(
            {
                "event": "error",
                "payload": {"message": "This connection does not accept messages"},
            }
        )

    async def chat_event(self, event):
        """
        Handle chat.event messages from the channel layer.

        Sends {"event", "payload"} to the WebSocket client. When the event
        takes the connected user out of the joined chatroom, the connection
        leaves the room group and is closed with 4003 after the frame.
        """
        await self.send_json({"event": event["event"], "payload": event["payload"]})

        if self._revokes_membership(event["event"], event["payload"]):
            group = room_group(self.chatroom_id)
            await self.channel_layer.group_discard(group, self.channel_name)
            self.groups_joined = [g for g in self.groups_joined if g != group]

            logger.info(
                f"User {self.scope['user'].id} lost access to chatroom "
                f"{self.chatroom_id}, closing connection"
            )
            await self.close(code=REALTIME_CONFIG.CLOSE_FORBIDDEN)

    def _revokes_membership(self, name: str, payload) -> bool:
        if self.chatroom_id is None or not isinstance(payload, dict):
            return False
        if payload.get("groupId") != self.chatroom_id:
            return False

        username = self.scope["user"].username
        if name == EVENTS.MEMBER_REMOVED:
            return payload.get("removedUser") == username
        if name == EVENTS.MEMBER_LEFT:
            return payload.get("leftUser") == username
        return False

    @database_sync_to_async
    def _get_chatroom(self) -> Chatroom | None:
        return Chatroom.objects.filter(id=self.chatroom_id).first()

    @database_sync_to_async
    def _is_member(self, chatroom: Chatroom, user) -> bool:
        return role_of(chatroom, user).is_member
