"""
Permission classes for chat API.

This module provides DRF permission classes for the chat system:
- IsChatroomMember: User is a current member of the chatroom
- IsChatroomAdmin: User is the owner or an admin of a group

Permission Hierarchy:
    OWNER > ADMIN > MEMBER

Design Decisions:
    - Roles are resolved through chat.authorization.role_of, the same
      authority the services use
    - Permissions are object-level; views resolve the chatroom with
      get_object() and then check_object_permissions()
    - Finer rules (who may promote, remove or delete what) stay in the
      services so REST and other callers share them
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

from chat.authorization import role_of
from chat.models import Chatroom, Message

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


def _chatroom_of(obj: Chatroom | Message) -> Chatroom:
    if isinstance(obj, Message):
        return obj.chatroom
    return obj


class IsChatroomMember(permissions.BasePermission):
    """
    Allows access only to current members of the chatroom.

    Works on Chatroom and Message objects.
    """

    message = "You are not a member of this chatroom"

    def has_object_permission(
        self, request: Request, view: APIView, obj: Chatroom | Message
    ) -> bool:
        return role_of(_chatroom_of(obj), request.user).is_member


class IsChatroomAdmin(permissions.BasePermission):
    """
    Allows access to the owner and admins of a group.

    Used to reject group image uploads before anything is stored.
    """

    message = "Only admins can perform this action"

    def has_object_permission(
        self, request: Request, view: APIView, obj: Chatroom | Message
    ) -> bool:
        chatroom = _chatroom_of(obj)
        return chatroom.is_group and role_of(chatroom, request.user).is_admin
