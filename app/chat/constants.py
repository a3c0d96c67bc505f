"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Group metadata limits (name, description)
- Message content classification (media URL suffixes)
- System message templates
- Realtime event names and channel groups
- Client reconnect policy

Import example:
    from chat.constants import GROUP_CONFIG, EVENTS
"""

from datetime import datetime, timezone
from typing import Final


# Read-state baseline for members that never opened a chatroom
EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Placeholder returned by the direct-chat preview when no chatroom exists yet
NEW_CHATROOM: Final[str] = "new-chatroom"

# Partner name shown when the other side of a 1:1 chat no longer exists
DELETED_USER: Final[str] = "deletedUser"


# =============================================================================
# Group Configuration
# =============================================================================


class GROUP_CONFIG:
    """Limits for group chat metadata."""

    MAX_NAME_LENGTH: Final[int] = 50
    MAX_DESCRIPTION_LENGTH: Final[int] = 200


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message content classification."""

    IMAGE_EXTENSIONS: Final[tuple] = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp")
    AUDIO_EXTENSIONS: Final[tuple] = (".webm", ".mp3", ".mp4", ".wav", ".aac")
    REMOTE_URL_PREFIXES: Final[tuple] = ("http://", "https://")


class SYSTEM_MESSAGES:
    """Templates for system messages emitted by group mutations."""

    INVITED: Final[str] = "{actor} has invited {usernames} to the group"
    PROMOTED: Final[str] = "{username} has been promoted to admin by {actor}"
    DEMOTED: Final[str] = "{username} has been demoted to member by {actor}"
    REMOVED: Final[str] = "{username} has been removed from the group by {actor}"
    LEFT: Final[str] = "{actor} has left the group"
    UPDATED: Final[str] = "{actor} updated group: {changes}"
    NAME_CHANGED: Final[str] = 'Group name changed to "{name}"'
    DESCRIPTION_UPDATED: Final[str] = "Group description updated"
    IMAGE_UPDATED: Final[str] = "{actor} updated the group image"


# =============================================================================
# Realtime Configuration
# =============================================================================


class EVENTS:
    """Event names pushed to WebSocket clients."""

    MESSAGE: Final[str] = "message"
    MESSAGE_UPDATE: Final[str] = "message-update"
    MESSAGE_DELETE: Final[str] = "message-delete"
    GROUP_MEMBER_ADDED: Final[str] = "group-member-added"
    ADMIN_PROMOTED: Final[str] = "admin-promoted"
    ADMIN_DEMOTED: Final[str] = "admin-demoted"
    MEMBER_REMOVED: Final[str] = "member-removed"
    MEMBER_LEFT: Final[str] = "member-left"
    GROUP_UPDATED: Final[str] = "group-updated"


class REALTIME_CONFIG:
    """Channel layer group naming and WebSocket close codes."""

    ROOM_GROUP_PREFIX: Final[str] = "chat_"
    # Personal group of a user, joined by every connection they open
    USER_GROUP_PREFIX: Final[str] = "chat_user_"

    # Channel layer message type, dispatched to Consumer.chat_event
    EVENT_TYPE: Final[str] = "chat.event"

    CLOSE_UNAUTHENTICATED: Final[int] = 4001
    CLOSE_FORBIDDEN: Final[int] = 4003
    CLOSE_NOT_FOUND: Final[int] = 4004


class RECONNECT_CONFIG:
    """Client session reconnect policy defaults."""

    INITIAL_DELAY_MS: Final[int] = 2000
    MAX_DELAY_MS: Final[int] = 10000
    MAX_ATTEMPTS: Final[int] = 3
    CONNECT_TIMEOUT_MS: Final[int] = 10000
