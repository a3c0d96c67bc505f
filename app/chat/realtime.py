"""
Realtime fan-out for chat events.

Services call these helpers after their transaction commits. Events go out
through the Channels channel layer to the "chat_<id>" group of a chatroom
or to the personal "chat_user_<id>" group of each recipient, and
ChatConsumer.chat_event forwards them as {"event", "payload"} frames.

Personal groups carry list-level events (a new direct chat, being added to
a group) to users who are not subscribed to the room yet. Nothing is ever
broadcast to every connected client.

Publishing is fire-and-forget: failures are logged and never raised, so a
broken channel layer cannot fail a request whose data is already committed.

Usage:
    from chat import realtime
    from chat.constants import EVENTS

    realtime.publish_to_room(chatroom.id, EVENTS.MESSAGE, payload)
    realtime.publish_to_users([alice.id, bob.id], EVENTS.MESSAGE, payload)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from chat.constants import REALTIME_CONFIG

logger = logging.getLogger(__name__)


def room_group(chatroom_id: int) -> str:
    """Channel layer group name for a chatroom."""
    return f"{REALTIME_CONFIG.ROOM_GROUP_PREFIX}{chatroom_id}"


def user_group(user_id: int) -> str:
    """Channel layer group name for a user's own connections."""
    return f"{REALTIME_CONFIG.USER_GROUP_PREFIX}{user_id}"


def publish(group: str, event: str, payload: Any) -> None:
    """
    Send an event to a channel layer group.

    Args:
        group: Channel layer group name
        event: Event name (see chat.constants.EVENTS)
        payload: JSON-serializable payload
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning(f"No channel layer configured, dropping {event} for {group}")
        return

    try:
        async_to_sync(channel_layer.group_send)(
            group,
            {
                "type": REALTIME_CONFIG.EVENT_TYPE,
                "event": event,
                "payload": payload,
            },
        )
    except Exception:
        logger.exception(f"Failed to publish {event} to {group}")
        return

    logger.debug(f"Published {event} to {group}")


def publish_to_room(chatroom_id: int, event: str, payload: Any) -> None:
    """Publish an event to everyone connected to a chatroom."""
    publish(room_group(chatroom_id), event, payload)


def publish_to_users(user_ids: Iterable[int], event: str, payload: Any) -> None:
    """Publish an event to every connection of each listed user."""
    for user_id in dict.fromkeys(user_ids):
        publish(user_group(user_id), event, payload)
