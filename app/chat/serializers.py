"""
Serializers for the chat system.

This module provides DRF serializers for:
- Response payloads (users, messages) shared by REST responses and
  realtime events
- Request validation for chatroom, group and message operations

Related files:
    - models.py: Chatroom, Membership, Message
    - views.py: Views that use these serializers
    - services.py: Builds realtime payloads with MessageSerializer
    - queries.py: Builds list and detail payloads

Payload keys are camelCase; they are the wire format consumed by chat
clients over both REST and WebSocket.
"""

from rest_framework import serializers

from chat.models import Message


# =============================================================================
# Response Serializers
# =============================================================================


class UserSummarySerializer(serializers.Serializer):
    """Public view of a user inside chat payloads."""

    id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(read_only=True)
    avatar = serializers.CharField(read_only=True, allow_null=True)


class MessageSerializer(serializers.ModelSerializer):
    """
    Full message payload.

    Used for the "message", "message-update" and "message-delete" events and
    for chatroom detail responses. The sender is populated (null for system
    messages without an actor and for deleted accounts).
    """

    chatroom = serializers.IntegerField(source="chatroom_id", read_only=True)
    sender = UserSummarySerializer(read_only=True, allow_null=True)
    messageType = serializers.CharField(source="message_type", read_only=True)
    isSystemMessage = serializers.BooleanField(
        source="is_system_message", read_only=True
    )
    isEdited = serializers.BooleanField(source="is_edited", read_only=True)
    editedAt = serializers.DateTimeField(source="edited_at", read_only=True)
    editSeenBy = UserSummarySerializer(source="edit_seen_by", many=True, read_only=True)
    editSeenByOwner = serializers.BooleanField(
        source="edit_seen_by_owner", read_only=True
    )
    editSeenByPartner = serializers.BooleanField(
        source="edit_seen_by_partner", read_only=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "chatroom",
            "sender",
            "content",
            "messageType",
            "isSystemMessage",
            "isEdited",
            "editedAt",
            "editSeenBy",
            "editSeenByOwner",
            "editSeenByPartner",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


def message_payload(message: Message) -> dict:
    """Serialize a message into a plain dict suitable for the channel layer."""
    return dict(MessageSerializer(message).data)


# =============================================================================
# Request Serializers
# =============================================================================


class DirectChatLookupSerializer(serializers.Serializer):
    """Find-or-preview request for a direct chat."""

    username = serializers.CharField(max_length=30)


class DirectChatCreateSerializer(serializers.Serializer):
    """Create a direct chat together with its first message."""

    partner_username = serializers.CharField(max_length=30)
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)


class GroupCreateSerializer(serializers.Serializer):
    """
    Create a group chat.

    Length limits are enforced by GroupChatService after trimming so the
    error messages match between create and edit.
    """

    name = serializers.CharField(allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    welcome_message = serializers.CharField(
        required=False, allow_blank=True, default=""
    )


class GroupUpdateSerializer(serializers.Serializer):
    """Partial group metadata update; omitted fields are left untouched."""

    name = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class InviteSerializer(serializers.Serializer):
    """Invite users to a group by username."""

    usernames = serializers.ListField(
        child=serializers.CharField(max_length=30),
        allow_empty=False,
    )


class MemberTargetSerializer(serializers.Serializer):
    """Identify a group member by username (promote / demote)."""

    username = serializers.CharField(max_length=30)


class MessageCreateSerializer(serializers.Serializer):
    """Send a message to a chatroom."""

    chatroom = serializers.IntegerField()
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)


class MessageEditSerializer(serializers.Serializer):
    """Replace the content of a message."""

    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
