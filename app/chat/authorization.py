"""
Role authority for chat operations.

Every role decision in the chat app (services, DRF permission classes,
serializers) goes through role_of(). It is distinct from DRF permission
classes (in permissions.py), which only translate roles into HTTP access.

Key Components:
    Role: Caller's standing in a chatroom, including NON_MEMBER
    role_of: Resolve a user's Role in a chatroom
    can_delete_message: Message deletion matrix
    permission_flags: Per-viewer capability flags for group views

Usage:
    from chat.authorization import Role, role_of

    role = role_of(group, request.user)
    if not role.is_admin:
        return ServiceResult.from_error(PermissionDeniedError(...))
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authentication.models import User
    from chat.models import Chatroom, Membership, Message


class Role(enum.Enum):
    """
    A user's standing in a chatroom.

    OWNER and ADMIN together are the chatroom's admins. Members of direct
    chatrooms are always MEMBER.
    """

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    NON_MEMBER = "non_member"

    @property
    def is_member(self) -> bool:
        return self is not Role.NON_MEMBER

    @property
    def is_admin(self) -> bool:
        return self in (Role.OWNER, Role.ADMIN)

    @property
    def is_owner(self) -> bool:
        return self is Role.OWNER

    @classmethod
    def from_membership(cls, membership: Membership | None) -> Role:
        if membership is None or membership.user_id is None:
            return cls.NON_MEMBER
        return cls(membership.role)


def role_of(chatroom: Chatroom, user: User | None) -> Role:
    """
    Resolve the role of a user in a chatroom.

    Args:
        chatroom: Chatroom to check
        user: User to check (None or anonymous resolves to NON_MEMBER)

    Returns:
        Role of the user; NON_MEMBER when there is no membership row
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return Role.NON_MEMBER

    role = (
        chatroom.memberships.filter(user_id=user.pk)
        .values_list("role", flat=True)
        .first()
    )
    if role is None:
        return Role.NON_MEMBER
    return Role(role)


def can_delete_message(message: Message, actor: User) -> tuple[bool, str | None]:
    """
    Decide whether an actor may delete a message.

    Direct chatrooms: only the sender.
    Groups: the sender always; the owner any message; admins only messages
    from plain members (or with no resolvable sender); members only their own.

    Returns:
        Tuple of (allowed, reason). reason is None when allowed.
    """
    if message.sender_id is not None and message.sender_id == actor.pk:
        return True, None

    chatroom = message.chatroom
    if not chatroom.is_group:
        return False, "You can only delete your own messages"

    actor_role = role_of(chatroom, actor)
    if actor_role is Role.OWNER:
        return True, None

    if actor_role is Role.ADMIN:
        sender_role = (
            role_of(chatroom, message.sender)
            if message.sender_id is not None
            else Role.NON_MEMBER
        )
        if sender_role.is_admin:
            return False, "Admins cannot delete messages from other admins or the owner"
        return True, None

    return False, "You can only delete your own messages"


def permission_flags(role: Role) -> dict[str, bool]:
    """
    Capability flags shown to a group viewer.

    Returns:
        {"isAdmin", "isCreator", "canInvite", "canRemoveMembers",
         "canEditGroup", "canPromoteMembers"}
    """
    return {
        "isAdmin": role.is_admin,
        "isCreator": role.is_owner,
        "canInvite": role.is_admin,
        "canRemoveMembers": role.is_admin,
        "canEditGroup": role.is_admin,
        "canPromoteMembers": role.is_owner,
    }
