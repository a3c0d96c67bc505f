"""
Read-side aggregation for chat views.

Builds the camelCase payloads for the chatroom list, chatroom detail and
group member views. Mutations live in services.py; the only write done here
is the lazy removal of empty direct chats whose partner account is gone.

Functions:
    list_chatrooms_for_user: Sorted chatroom list with unread counts
    chatroom_detail: Messages and metadata of one chatroom
    group_overview: Group info, members, admins and viewer permissions
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING

from rest_framework import serializers

from chat.authorization import Role, permission_flags, role_of
from chat.constants import DELETED_USER
from chat.models import Chatroom, MemberRole, Membership
from chat.serializers import MessageSerializer, UserSummarySerializer, message_payload
from chat.services import ReadStateService

if TYPE_CHECKING:
    from authentication.models import User

logger = logging.getLogger(__name__)

_datetime_field = serializers.DateTimeField()


def _format(value):
    return _datetime_field.to_representation(value) if value is not None else None


def _user_summary(user) -> dict | None:
    if user is None:
        return None
    return dict(UserSummarySerializer(user).data)


def _timestamps(chatroom: Chatroom) -> list:
    """Message creation times, newest first."""
    return [
        _format(value)
        for value in chatroom.messages.order_by("-created_at", "-id").values_list(
            "created_at", flat=True
        )
    ]


def _current_members(chatroom: Chatroom) -> list[Membership]:
    return list(
        chatroom.memberships.filter(user__isnull=False).select_related("user")
    )


def _group_fields(chatroom: Chatroom, memberships: list[Membership]) -> tuple[list, list]:
    members = [_user_summary(m.user) for m in memberships]
    admins = [
        _user_summary(m.user)
        for m in memberships
        if m.role in (MemberRole.OWNER, MemberRole.ADMIN)
    ]
    return members, admins


def _direct_partner(chatroom: Chatroom, user: User):
    """The other member of a direct chatroom, or None if the account is gone."""
    membership = (
        chatroom.memberships.filter(user__isnull=False)
        .exclude(user=user)
        .select_related("user")
        .first()
    )
    return membership.user if membership else None


# =============================================================================
# Chatroom list
# =============================================================================


def _compare_chatrooms(a: tuple, b: tuple) -> int:
    """
    Order chatroom list entries.

    Each entry is (item, last_message_created_at, last_activity).
    Deleted-account chats go last, chats without messages go after chats
    with messages, groups compare by last activity, and remaining pairs
    with messages compare by their newest message.
    """
    item_a, last_a, activity_a = a
    item_b, last_b, activity_b = b

    deleted_a = item_a.get("isDeletedAccount", False)
    deleted_b = item_b.get("isDeletedAccount", False)
    if deleted_a != deleted_b:
        return 1 if deleted_a else -1

    if (last_a is None) != (last_b is None):
        return 1 if last_a is None else -1

    if item_a["isGroupChat"] and item_b["isGroupChat"]:
        if activity_a == activity_b:
            return 0
        return -1 if activity_a > activity_b else 1

    if last_a is not None and last_b is not None:
        if last_a == last_b:
            return 0
        return -1 if last_a > last_b else 1

    return 0


def list_chatrooms_for_user(user: User) -> dict:
    """
    Every chatroom the user belongs to, sorted for the chat list.

    Direct chats without a resolvable partner and without messages are
    deleted here and left out of the result.

    Returns:
        {"chatrooms": [...], "currentUsername", "currentUserAvatar", "volume"}
    """
    chatrooms = Chatroom.objects.filter(memberships__user=user).select_related(
        "creator"
    )

    entries = []
    for chatroom in chatrooms:
        last_message = (
            chatroom.messages.select_related("sender")
            .order_by("-created_at", "-id")
            .first()
        )
        item = {
            "chatId": chatroom.id,
            "isGroupChat": chatroom.is_group,
            "lastMessage": message_payload(last_message) if last_message else None,
            "timestamps": _timestamps(chatroom),
            "unreadMessagesCount": ReadStateService.unread_count(chatroom, user),
        }

        if chatroom.is_group:
            members, admins = _group_fields(chatroom, _current_members(chatroom))
            item.update(
                {
                    "groupName": chatroom.name,
                    "groupDescription": chatroom.description,
                    "groupImage": chatroom.image,
                    "creator": _user_summary(chatroom.creator),
                    "admins": admins,
                    "memberCount": len(members),
                    "lastActivity": _format(chatroom.last_activity),
                }
            )
        else:
            partner = _direct_partner(chatroom, user)
            if partner is None and last_message is None:
                logger.info(f"Deleting orphaned direct chatroom {chatroom.id}")
                chatroom.delete()
                continue
            item.update(
                {
                    "usernames": [partner.username] if partner else [],
                    "partnerAvatar": partner.avatar if partner else None,
                    "isDeletedAccount": partner is None,
                }
            )

        entries.append(
            (
                item,
                last_message.created_at if last_message else None,
                chatroom.last_activity,
            )
        )

    entries.sort(key=functools.cmp_to_key(_compare_chatrooms))

    return {
        "chatrooms": [entry[0] for entry in entries],
        "currentUsername": user.username,
        "currentUserAvatar": user.avatar,
        "volume": user.volume,
    }


# =============================================================================
# Chatroom detail
# =============================================================================


def group_overview(group: Chatroom, role: Role) -> dict:
    """Group info, members, admins and the viewer's capability flags."""
    members, admins = _group_fields(group, _current_members(group))
    return {
        "groupInfo": {
            "id": group.id,
            "name": group.name,
            "description": group.description,
            "image": group.image,
            "creator": _user_summary(group.creator),
            "createdAt": _format(group.created_at),
            "lastActivity": _format(group.last_activity),
        },
        "members": members,
        "admins": admins,
        "memberCount": len(members),
        "userPermissions": permission_flags(role),
    }


def chatroom_detail(chatroom: Chatroom, user: User) -> dict:
    """
    Messages and metadata of a chatroom as seen by a member.

    Membership is checked by the caller.
    """
    messages = chatroom.messages.select_related("sender").prefetch_related(
        "edit_seen_by"
    )
    data = {
        "chatroomMessages": MessageSerializer(messages, many=True).data,
        "timestamps": _timestamps(chatroom),
        "unreadMessagesCount": ReadStateService.unread_count(chatroom, user),
        "currentUsername": user.username,
        "currentUserId": user.id,
        "volume": user.volume,
        "isGroupChat": chatroom.is_group,
    }

    if chatroom.is_group:
        data.update(group_overview(chatroom, role_of(chatroom, user)))
        return data

    partner = _direct_partner(chatroom, user)
    data.update(
        {
            "partnerName": partner.username if partner else DELETED_USER,
            "partnerAvatar": partner.avatar if partner else None,
        }
    )
    return data
