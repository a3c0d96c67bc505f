"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on chatrooms, memberships, read state and messages.

Services:
    ReadStateService: Per-member last-seen timestamps and unread counts
    DirectChatService: Direct (1:1) chat lookup, creation and deletion
    GroupChatService: Group lifecycle, membership and metadata changes
    MessageService: Message send, edit, delete and edit acknowledgement

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.from_error() with a typed error
    - Unexpected failures raise exceptions
    - Multi-row mutations run inside one transaction
    - Realtime events are published after commit, so clients never observe
      uncommitted state
    - Every group membership or metadata change bumps last_activity and
      creates exactly one system message

Usage:
    from chat.services import DirectChatService, GroupChatService, MessageService

    result = GroupChatService.create(creator=user, name="Team")
    group = result.unwrap()

    result = MessageService.send(group, user, "Hello everyone!")
    if result.success:
        message = result.data
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.utils import timezone

from core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import BaseService, ServiceResult

from chat import realtime
from chat.authorization import Role, can_delete_message, role_of
from chat.constants import (
    EPOCH,
    EVENTS,
    GROUP_CONFIG,
    NEW_CHATROOM,
    SYSTEM_MESSAGES,
)
from chat.models import Chatroom, DirectChatPair, MemberRole, Membership, Message
from chat.serializers import message_payload

if TYPE_CHECKING:
    from authentication.models import User


def _not_member() -> PermissionDeniedError:
    return PermissionDeniedError(
        "You are not a member of this chatroom", error_code="NOT_MEMBER"
    )


def _user_not_found() -> NotFoundError:
    return NotFoundError("User not found", error_code="USER_NOT_FOUND")


def _group_exists() -> ConflictError:
    return ConflictError(
        "A group with this name already exists", error_code="GROUP_EXISTS"
    )


# =============================================================================
# ReadStateService
# =============================================================================


class ReadStateService(BaseService):
    """
    Read state of chatroom members.

    Each member's last_seen lives on their Membership row, so marking a
    chatroom read only writes that member's row.

    Methods:
        mark_read: Set the member's last_seen to now
        unread_count: Count messages from others newer than last_seen
    """

    @classmethod
    def mark_read(cls, chatroom: Chatroom, user: User) -> ServiceResult[datetime]:
        """
        Mark a chatroom as read for a member.

        Returns:
            ServiceResult with the timestamp written

        Error codes:
            NOT_MEMBER: User is not a member of the chatroom
        """
        now = timezone.now()
        updated = Membership.objects.filter(chatroom=chatroom, user=user).update(
            last_seen=now, updated_at=now
        )
        if not updated:
            return ServiceResult.from_error(_not_member())

        cls.get_logger().debug(f"User {user.id} read chatroom {chatroom.id}")
        return ServiceResult.success(now)

    @classmethod
    def last_seen(cls, chatroom: Chatroom, user: User) -> datetime:
        """Return the member's last_seen, or the epoch for non-members."""
        value = (
            Membership.objects.filter(chatroom=chatroom, user=user)
            .values_list("last_seen", flat=True)
            .first()
        )
        return value or EPOCH

    @classmethod
    def unread_count(cls, chatroom: Chatroom, user: User) -> int:
        """
        Count unread messages for a user.

        Unread means created after the user's last_seen and not sent by the
        user. Messages without a sender count as unread.
        """
        return (
            chatroom.messages.filter(created_at__gt=cls.last_seen(chatroom, user))
            .exclude(sender=user)
            .count()
        )


# =============================================================================
# DirectChatService
# =============================================================================


class DirectChatService(BaseService):
    """
    Service for direct (1:1) chatrooms.

    Methods:
        find_or_preview: Existing chatroom id, or a preview of the partner
        create: Create the chatroom together with its first message
        delete: Delete a direct chatroom and its messages
    """

    @classmethod
    def _resolve_partner(
        cls, current_user: User, username: str
    ) -> ServiceResult[User]:
        partner = get_user_model().objects.filter(username=username).first()
        if partner is None:
            return ServiceResult.from_error(_user_not_found())
        if partner.pk == current_user.pk:
            return ServiceResult.from_error(
                PermissionDeniedError(
                    "You cannot start a chat with yourself", error_code="SELF_CHAT"
                )
            )
        return ServiceResult.success(partner)

    @classmethod
    def find_or_preview(cls, current_user: User, target_username: str) -> ServiceResult[dict]:
        """
        Look up the direct chatroom with another user.

        Nothing is created. When no chatroom exists yet, the result is a
        preview the client uses to open an empty conversation.

        Returns:
            {"chatroom": id} or
            {"chatroom": "new-chatroom", "partnerName": str, "partnerId": int}

        Error codes:
            USER_NOT_FOUND: Username does not resolve
            SELF_CHAT: Target is the current user
        """
        result = cls._resolve_partner(current_user, target_username)
        if not result.success:
            return result
        partner = result.data

        user_lower, user_higher = DirectChatPair.ordered(current_user, partner)
        chatroom_id = (
            DirectChatPair.objects.filter(user_lower=user_lower, user_higher=user_higher)
            .values_list("chatroom_id", flat=True)
            .first()
        )
        if chatroom_id is not None:
            return ServiceResult.success({"chatroom": chatroom_id})

        return ServiceResult.success(
            {
                "chatroom": NEW_CHATROOM,
                "partnerName": partner.username,
                "partnerId": partner.id,
            }
        )

    @classmethod
    def create(
        cls,
        current_user: User,
        partner_username: str,
        first_message_content: str,
    ) -> ServiceResult[Chatroom]:
        """
        Create a direct chatroom with its first message.

        Both members start at the epoch; the sender's last_seen is then set
        to the first message's created_at so only the partner sees it unread.
        The first message is published to both participants' personal
        channels because nobody is subscribed to the new room yet.

        Error codes:
            USER_NOT_FOUND: Partner username does not resolve
            SELF_CHAT: Partner is the current user
            CONTENT_REQUIRED: Empty first message
            DIRECT_CHAT_EXISTS: The pair already has a chatroom
        """
        result = cls._resolve_partner(current_user, partner_username)
        if not result.success:
            return result
        partner = result.data

        if not (first_message_content or "").strip():
            return ServiceResult.from_error(
                ValidationError(
                    "Message content is required", error_code="CONTENT_REQUIRED"
                )
            )

        user_lower, user_higher = DirectChatPair.ordered(current_user, partner)
        exists_error = ConflictError(
            "A chat with this user already exists", error_code="DIRECT_CHAT_EXISTS"
        )
        if DirectChatPair.objects.filter(
            user_lower=user_lower, user_higher=user_higher
        ).exists():
            return ServiceResult.from_error(exists_error)

        try:
            with cls.atomic():
                chatroom = Chatroom.objects.create(is_group=False)
                DirectChatPair.objects.create(
                    chatroom=chatroom, user_lower=user_lower, user_higher=user_higher
                )
                Membership.objects.bulk_create(
                    [
                        Membership(chatroom=chatroom, user=partner, last_seen=EPOCH),
                        Membership(chatroom=chatroom, user=current_user, last_seen=EPOCH),
                    ]
                )
                message = Message.objects.create(
                    chatroom=chatroom,
                    sender=current_user,
                    content=first_message_content,
                )
                Membership.objects.filter(chatroom=chatroom, user=current_user).update(
                    last_seen=message.created_at
                )
        except IntegrityError:
            return ServiceResult.from_error(exists_error)

        payload = message_payload(message)
        recipients = [user_lower.id, user_higher.id]
        cls.on_commit(
            lambda: realtime.publish_to_users(recipients, EVENTS.MESSAGE, payload)
        )

        cls.get_logger().info(
            f"Created direct chatroom {chatroom.id} "
            f"between users {user_lower.id} and {user_higher.id}"
        )
        return ServiceResult.success(chatroom)

    @classmethod
    def delete(cls, chatroom: Chatroom, user: User) -> ServiceResult[None]:
        """
        Delete a direct chatroom and all its messages.

        Any participant may delete it.

        Error codes:
            NOT_DIRECT_CHAT: Chatroom is a group
            NOT_MEMBER: User is not a participant
        """
        if chatroom.is_group:
            return ServiceResult.from_error(
                ValidationError(
                    "This is not a direct chat", error_code="NOT_DIRECT_CHAT"
                )
            )
        if not chatroom.has_member(user):
            return ServiceResult.from_error(_not_member())

        chatroom_id = chatroom.id
        with cls.atomic():
            chatroom.delete()

        cls.get_logger().info(f"User {user.id} deleted direct chatroom {chatroom_id}")
        return ServiceResult.success(None)


# =============================================================================
# GroupChatService
# =============================================================================


class GroupChatService(BaseService):
    """
    Service for group chatrooms.

    Role requirements:
        create: any user (becomes owner)
        invite, remove_member, edit_metadata, change_image: owner or admin
        promote, demote, delete: owner
        leave: any member except the owner
        members: any member

    Ownership is never transferred; the owner deletes the group instead of
    leaving it.
    """

    @classmethod
    def _validate_name(cls, name: str) -> ValidationError | None:
        if not name:
            return ValidationError("Group name is required", error_code="NAME_REQUIRED")
        if len(name) > GROUP_CONFIG.MAX_NAME_LENGTH:
            return ValidationError(
                f"Group name too long (max {GROUP_CONFIG.MAX_NAME_LENGTH} characters)",
                error_code="NAME_TOO_LONG",
            )
        return None

    @classmethod
    def _validate_description(cls, description: str) -> ValidationError | None:
        if len(description) > GROUP_CONFIG.MAX_DESCRIPTION_LENGTH:
            return ValidationError(
                "Group description too long "
                f"(max {GROUP_CONFIG.MAX_DESCRIPTION_LENGTH} characters)",
                error_code="DESCRIPTION_TOO_LONG",
            )
        return None

    @classmethod
    def _name_taken(cls, name: str, exclude_id: int | None = None) -> bool:
        qs = Chatroom.objects.filter(is_group=True, name=name)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()

    @classmethod
    def _require_role(
        cls, group: Chatroom, actor: User, *, owner: bool = False, message: str
    ) -> ServiceResult | None:
        """Return a failed result unless the actor holds the required role."""
        if not group.is_group:
            return ServiceResult.from_error(
                NotFoundError("Group chat not found", error_code="GROUP_NOT_FOUND")
            )
        role = role_of(group, actor)
        allowed = role.is_owner if owner else role.is_admin
        if not allowed:
            error_code = "NOT_OWNER" if owner else "NOT_ADMIN"
            return ServiceResult.from_error(
                PermissionDeniedError(message, error_code=error_code)
            )
        return None

    @classmethod
    def _system_message(
        cls, group: Chatroom, content: str, sender: User | None
    ) -> Message:
        """
        Internal: Bump last_activity and create the system message.

        Must run inside the caller's transaction.
        """
        group.touch()
        return Message.objects.create(
            chatroom=group,
            sender=sender,
            content=content,
            is_system_message=True,
        )

    @classmethod
    def _publish(cls, group_id: int, message: Message, event: str, payload: dict) -> None:
        """Publish the system message and the typed event after commit."""
        message_data = message_payload(message)

        def send():
            realtime.publish_to_room(group_id, EVENTS.MESSAGE, message_data)
            realtime.publish_to_room(group_id, event, payload)

        cls.on_commit(send)

    @classmethod
    def create(
        cls,
        creator: User,
        name: str,
        description: str = "",
        welcome_message: str = "",
    ) -> ServiceResult[Chatroom]:
        """
        Create a group chat.

        The creator becomes the only member with role owner and
        last_seen = now. A non-empty welcome message is posted as a normal
        message from the creator. It is published to the creator's
        personal channel since the new room has no subscribers yet.

        Error codes:
            NAME_REQUIRED, NAME_TOO_LONG, DESCRIPTION_TOO_LONG: Invalid input
            GROUP_EXISTS: A group with this exact name exists
        """
        name = (name or "").strip()
        description = (description or "").strip()
        welcome_message = (welcome_message or "").strip()

        error = cls._validate_name(name) or cls._validate_description(description)
        if error:
            return ServiceResult.from_error(error)

        if cls._name_taken(name):
            return ServiceResult.from_error(_group_exists())

        now = timezone.now()
        message = None
        try:
            with cls.atomic():
                group = Chatroom.objects.create(
                    is_group=True,
                    name=name,
                    description=description,
                    creator=creator,
                    last_activity=now,
                )
                Membership.objects.create(
                    chatroom=group, user=creator, role=MemberRole.OWNER, last_seen=now
                )
                if welcome_message:
                    message = Message.objects.create(
                        chatroom=group, sender=creator, content=welcome_message
                    )
        except IntegrityError:
            return ServiceResult.from_error(_group_exists())

        if message is not None:
            payload = message_payload(message)
            cls.on_commit(
                lambda: realtime.publish_to_users([creator.id], EVENTS.MESSAGE, payload)
            )

        cls.get_logger().info(f"User {creator.id} created group {group.id}")
        return ServiceResult.success(group)

    @classmethod
    def invite(
        cls, group: Chatroom, actor: User, usernames: list[str]
    ) -> ServiceResult[list[str]]:
        """
        Add users to a group.

        Unknown usernames are dropped silently. New members start with
        last_seen = now so earlier history is not counted as unread. The
        group-member-added event goes to the room and to each new member's
        personal channel.

        Returns:
            ServiceResult with the usernames actually added

        Error codes:
            INVALID_USERNAMES: Empty or malformed list
            NOT_ADMIN: Actor is not owner/admin
            USERS_NOT_FOUND: No username resolved
            ALREADY_MEMBERS: Every resolved user is already a member
        """
        if (
            not isinstance(usernames, (list, tuple))
            or not usernames
            or not all(isinstance(u, str) and u for u in usernames)
        ):
            return ServiceResult.from_error(
                ValidationError(
                    "Please provide usernames to invite",
                    error_code="INVALID_USERNAMES",
                )
            )

        denied = cls._require_role(group, actor, message="Only admins can invite users")
        if denied:
            return denied

        found = {
            user.username: user
            for user in get_user_model().objects.filter(username__in=usernames)
        }
        if not found:
            return ServiceResult.from_error(
                NotFoundError("No valid users found", error_code="USERS_NOT_FOUND")
            )

        member_ids = set(
            group.memberships.filter(user__isnull=False).values_list("user_id", flat=True)
        )
        new_users = []
        for username in dict.fromkeys(usernames):
            user = found.get(username)
            if user is not None and user.id not in member_ids:
                new_users.append(user)

        if not new_users:
            return ServiceResult.from_error(
                ConflictError(
                    "All users are already in the group", error_code="ALREADY_MEMBERS"
                )
            )

        invited = [user.username for user in new_users]
        new_user_ids = [user.id for user in new_users]
        now = timezone.now()
        with cls.atomic():
            Membership.objects.bulk_create(
                [
                    Membership(chatroom=group, user=user, last_seen=now)
                    for user in new_users
                ],
                ignore_conflicts=True,
            )
            message = cls._system_message(
                group,
                SYSTEM_MESSAGES.INVITED.format(
                    actor=actor.username, usernames=", ".join(invited)
                ),
                sender=actor,
            )

        message_data = message_payload(message)
        added = {
            "groupId": group.id,
            "newMembers": invited,
            "invitedBy": actor.username,
        }

        def send():
            realtime.publish_to_room(group.id, EVENTS.MESSAGE, message_data)
            realtime.publish_to_room(group.id, EVENTS.GROUP_MEMBER_ADDED, added)
            realtime.publish_to_users(new_user_ids, EVENTS.GROUP_MEMBER_ADDED, added)

        cls.on_commit(send)

        cls.get_logger().info(
            f"User {actor.id} invited {len(new_users)} users to group {group.id}"
        )
        return ServiceResult.success(invited)

    @classmethod
    def promote(cls, group: Chatroom, actor: User, username: str) -> ServiceResult[Membership]:
        """
        Promote a member to admin.

        Error codes:
            NOT_OWNER: Only the owner promotes
            USER_NOT_FOUND: Unknown username
            NOT_MEMBER: Target is not in the group
            ALREADY_ADMIN: Target already is an admin (or the owner)
        """
        denied = cls._require_role(
            group, actor, owner=True, message="Only the group owner can promote members"
        )
        if denied:
            return denied

        target = get_user_model().objects.filter(username=username).first()
        if target is None:
            return ServiceResult.from_error(_user_not_found())

        membership = group.membership_for(target)
        if membership is None:
            return ServiceResult.from_error(
                ValidationError(
                    "User is not a member of this group", error_code="NOT_MEMBER"
                )
            )
        if membership.is_admin:
            return ServiceResult.from_error(
                ConflictError("User is already an admin", error_code="ALREADY_ADMIN")
            )

        with cls.atomic():
            membership.role = MemberRole.ADMIN
            membership.save(update_fields=["role", "updated_at"])
            message = cls._system_message(
                group,
                SYSTEM_MESSAGES.PROMOTED.format(
                    username=target.username, actor=actor.username
                ),
                sender=actor,
            )

        cls._publish(
            group.id,
            message,
            EVENTS.ADMIN_PROMOTED,
            {
                "groupId": group.id,
                "promotedUser": target.username,
                "promotedBy": actor.username,
            },
        )

        cls.get_logger().info(f"User {target.id} promoted in group {group.id}")
        return ServiceResult.success(membership)

    @classmethod
    def demote(cls, group: Chatroom, actor: User, username: str) -> ServiceResult[Membership]:
        """
        Demote an admin to member.

        The resulting system message has no sender.

        Error codes:
            NOT_OWNER: Only the owner demotes
            USER_NOT_FOUND: Unknown username
            CANNOT_DEMOTE_OWNER: Target is the owner
            NOT_ADMIN: Target is not an admin
        """
        denied = cls._require_role(
            group, actor, owner=True, message="Only the group owner can demote admins"
        )
        if denied:
            return denied

        target = get_user_model().objects.filter(username=username).first()
        if target is None:
            return ServiceResult.from_error(_user_not_found())

        membership = group.membership_for(target)
        if Role.from_membership(membership) is Role.OWNER:
            return ServiceResult.from_error(
                PermissionDeniedError(
                    "Cannot demote the group owner", error_code="CANNOT_DEMOTE_OWNER"
                )
            )
        if membership is None or membership.role != MemberRole.ADMIN:
            return ServiceResult.from_error(
                ValidationError("User is not an admin", error_code="NOT_ADMIN")
            )

        with cls.atomic():
            membership.role = MemberRole.MEMBER
            membership.save(update_fields=["role", "updated_at"])
            message = cls._system_message(
                group,
                SYSTEM_MESSAGES.DEMOTED.format(
                    username=target.username, actor=actor.username
                ),
                sender=None,
            )

        cls._publish(
            group.id,
            message,
            EVENTS.ADMIN_DEMOTED,
            {
                "groupId": group.id,
                "demotedUser": target.username,
                "demotedBy": actor.username,
            },
        )

        cls.get_logger().info(f"User {target.id} demoted in group {group.id}")
        return ServiceResult.success(membership)

    @classmethod
    def remove_member(cls, group: Chatroom, actor: User, username: str) -> ServiceResult[str]:
        """
        Remove a member from a group.

        Deleting the membership row drops the member, their admin status and
        their read state together.

        Error codes:
            NOT_ADMIN: Actor is not owner/admin
            USER_NOT_FOUND: Unknown username
            CANNOT_REMOVE_OWNER: Target is the owner
            NOT_MEMBER: Target is not in the group
        """
        denied = cls._require_role(group, actor, message="Only admins can remove members")
        if denied:
            return denied

        target = get_user_model().objects.filter(username=username).first()
        if target is None:
            return ServiceResult.from_error(_user_not_found())

        membership = group.membership_for(target)
        if Role.from_membership(membership) is Role.OWNER:
            return ServiceResult.from_error(
                PermissionDeniedError(
                    "Cannot remove the group owner", error_code="CANNOT_REMOVE_OWNER"
                )
            )
        if membership is None:
            return ServiceResult.from_error(
                ValidationError(
                    "User is not a member of this group", error_code="NOT_MEMBER"
                )
            )

        with cls.atomic():
            membership.delete()
            message = cls._system_message(
                group,
                SYSTEM_MESSAGES.REMOVED.format(
                    username=target.username, actor=actor.username
                ),
                sender=actor,
            )

        cls._publish(
            group.id,
            message,
            EVENTS.MEMBER_REMOVED,
            {
                "groupId": group.id,
                "removedUser": target.username,
                "removedBy": actor.username,
            },
        )

        cls.get_logger().info(
            f"User {actor.id} removed user {target.id} from group {group.id}"
        )
        return ServiceResult.success(target.username)

    @classmethod
    def leave(cls, group: Chatroom, actor: User) -> ServiceResult[None]:
        """
        Leave a group.

        Error codes:
            NOT_MEMBER: Actor is not in the group
            OWNER_CANNOT_LEAVE: The owner must delete the group instead
        """
        if not group.is_group:
            return ServiceResult.from_error(
                NotFoundError("Group chat not found", error_code="GROUP_NOT_FOUND")
            )

        membership = group.membership_for(actor)
        if membership is None:
            return ServiceResult.from_error(_not_member())
        if membership.role == MemberRole.OWNER:
            return ServiceResult.from_error(
                PermissionDeniedError(
                    "Group owner cannot leave. "
                    "Transfer ownership or delete the group instead.",
                    error_code="OWNER_CANNOT_LEAVE",
                )
            )

        with cls.atomic():
            membership.delete()
            message = cls._system_message(
                group,
                SYSTEM_MESSAGES.LEFT.format(actor=actor.username),
                sender=actor,
            )

        cls._publish(
            group.id,
            message,
            EVENTS.MEMBER_LEFT,
            {"groupId": group.id, "leftUser": actor.username},
        )

        cls.get_logger().info(f"User {actor.id} left group {group.id}")
        return ServiceResult.success(None)

    @classmethod
    def edit_metadata(
        cls,
        group: Chatroom,
        actor: User,
        name: str | None = None,
        description: str | None = None,
    ) -> ServiceResult[dict]:
        """
        Change the group name and/or description.

        Each provided value is trimmed and compared with the current one;
        only changed fields are validated and applied.

        Returns:
            ServiceResult with the applied changes, e.g. {"name": "New"}

        Error codes:
            NOT_ADMIN: Actor is not owner/admin
            NAME_REQUIRED, NAME_TOO_LONG, DESCRIPTION_TOO_LONG: Invalid input
            GROUP_EXISTS: New name is taken by another group
            NO_CHANGES: Nothing differs from the current values
        """
        denied = cls._require_role(
            group, actor, message="Only admins can edit group details"
        )
        if denied:
            return denied

        updates = {}
        changes = []

        if name is not None:
            name = name.strip()
            if name != group.name:
                error = cls._validate_name(name)
                if error:
                    return ServiceResult.from_error(error)
                if cls._name_taken(name, exclude_id=group.id):
                    return ServiceResult.from_error(_group_exists())
                updates["name"] = name
                changes.append(SYSTEM_MESSAGES.NAME_CHANGED.format(name=name))

        if description is not None:
            description = description.strip()
            if description != group.description:
                error = cls._validate_description(description)
                if error:
                    return ServiceResult.from_error(error)
                updates["description"] = description
                changes.append(SYSTEM_MESSAGES.DESCRIPTION_UPDATED)

        if not updates:
            return ServiceResult.from_error(
                ValidationError("No changes to update", error_code="NO_CHANGES")
            )

        try:
            with cls.atomic():
                for field_name, value in updates.items():
                    setattr(group, field_name, value)
                group.save(update_fields=[*updates, "updated_at"])
                message = cls._system_message(
                    group,
                    SYSTEM_MESSAGES.UPDATED.format(
                        actor=actor.username, changes=", ".join(changes)
                    ),
                    sender=actor,
                )
        except IntegrityError:
            group.refresh_from_db()
            return ServiceResult.from_error(_group_exists())

        cls._publish(
            group.id,
            message,
            EVENTS.GROUP_UPDATED,
            {"groupId": group.id, "updates": updates, "updatedBy": actor.username},
        )

        cls.get_logger().info(
            f"User {actor.id} updated {sorted(updates)} of group {group.id}"
        )
        return ServiceResult.success(updates)

    @classmethod
    def change_image(cls, group: Chatroom, actor: User, image_url: str) -> ServiceResult[Chatroom]:
        """
        Set a new group image.

        Error codes:
            NOT_ADMIN: Actor is not owner/admin
        """
        denied = cls._require_role(
            group, actor, message="Only admins can change the group image"
        )
        if denied:
            return denied

        with cls.atomic():
            group.image = image_url
            group.save(update_fields=["image", "updated_at"])
            message = cls._system_message(
                group,
                SYSTEM_MESSAGES.IMAGE_UPDATED.format(actor=actor.username),
                sender=actor,
            )

        cls._publish(
            group.id,
            message,
            EVENTS.GROUP_UPDATED,
            {
                "groupId": group.id,
                "updates": {"image": image_url},
                "updatedBy": actor.username,
            },
        )

        cls.get_logger().info(f"User {actor.id} changed image of group {group.id}")
        return ServiceResult.success(group)

    @classmethod
    def delete(cls, group: Chatroom, actor: User) -> ServiceResult[None]:
        """
        Delete a group with all its messages.

        Error codes:
            NOT_OWNER: Only the owner may delete the group
        """
        denied = cls._require_role(
            group, actor, owner=True, message="Only the group owner can delete the group"
        )
        if denied:
            return denied

        group_id = group.id
        with cls.atomic():
            group.delete()

        cls.get_logger().info(f"User {actor.id} deleted group {group_id}")
        return ServiceResult.success(None)

    @classmethod
    def members(cls, group: Chatroom, user: User) -> ServiceResult[dict]:
        """
        Group info, members and admins as seen by a member.

        Error codes:
            NOT_MEMBER: Viewer is not in the group
        """
        from chat.queries import group_overview

        if not group.is_group:
            return ServiceResult.from_error(
                NotFoundError("Group chat not found", error_code="GROUP_NOT_FOUND")
            )

        role = role_of(group, user)
        if not role.is_member:
            return ServiceResult.from_error(_not_member())

        return ServiceResult.success(group_overview(group, role))


# =============================================================================
# MessageService
# =============================================================================


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        send: Post a message to a chatroom
        edit: Replace content, record edited_at and reset edit-seen state
        delete: Hard delete following the role matrix
        mark_edit_seen: Acknowledge the latest edit
    """

    @classmethod
    def send(cls, chatroom: Chatroom, sender: User, content: str) -> ServiceResult[Message]:
        """
        Send a message.

        Error codes:
            NOT_MEMBER: Sender is not in the chatroom
            CONTENT_REQUIRED: Empty content
        """
        if not chatroom.has_member(sender):
            return ServiceResult.from_error(_not_member())

        if not (content or "").strip():
            return ServiceResult.from_error(
                ValidationError(
                    "Message content is required", error_code="CONTENT_REQUIRED"
                )
            )

        message = Message.objects.create(chatroom=chatroom, sender=sender, content=content)

        payload = message_payload(message)
        cls.on_commit(
            lambda: realtime.publish_to_room(chatroom.id, EVENTS.MESSAGE, payload)
        )

        cls.get_logger().info(
            f"User {sender.id} sent message {message.id} to chatroom {chatroom.id}"
        )
        return ServiceResult.success(message)

    @classmethod
    def edit(cls, message: Message, actor: User, new_content: str) -> ServiceResult[Message]:
        """
        Edit message content.

        Sets edited_at and clears every edit-seen marker.

        Error codes:
            NOT_SENDER: Only the sender may edit
            SYSTEM_MESSAGE: System messages are immutable
            CONTENT_REQUIRED: Empty content
        """
        if message.sender_id is None or message.sender_id != actor.pk:
            return ServiceResult.from_error(
                PermissionDeniedError(
                    "You can only edit your own messages", error_code="NOT_SENDER"
                )
            )
        if message.is_system_message:
            return ServiceResult.from_error(
                PermissionDeniedError(
                    "System messages cannot be edited", error_code="SYSTEM_MESSAGE"
                )
            )
        if not (new_content or "").strip():
            return ServiceResult.from_error(
                ValidationError(
                    "Message content is required", error_code="CONTENT_REQUIRED"
                )
            )

        with cls.atomic():
            message.content = new_content
            message.edited_at = timezone.now()
            message.edit_seen_by_owner = False
            message.edit_seen_by_partner = False
            message.save(
                update_fields=[
                    "content",
                    "edited_at",
                    "edit_seen_by_owner",
                    "edit_seen_by_partner",
                    "updated_at",
                ]
            )
            message.edit_seen_by.clear()

        payload = {"updatedMessage": message_payload(message)}
        cls.on_commit(
            lambda: realtime.publish_to_room(
                message.chatroom_id, EVENTS.MESSAGE_UPDATE, payload
            )
        )

        cls.get_logger().info(f"User {actor.id} edited message {message.id}")
        return ServiceResult.success(message)

    @classmethod
    def delete(cls, message: Message, actor: User) -> ServiceResult[dict]:
        """
        Delete a message permanently.

        Returns:
            ServiceResult with the message payload captured before deletion

        Error codes:
            CANNOT_DELETE: Role matrix forbids the deletion
        """
        allowed, reason = can_delete_message(message, actor)
        if not allowed:
            return ServiceResult.from_error(
                PermissionDeniedError(reason, error_code="CANNOT_DELETE")
            )

        deleted = message_payload(message)
        chatroom_id = message.chatroom_id
        message_id = message.id
        with cls.atomic():
            message.delete()

        cls.on_commit(
            lambda: realtime.publish_to_room(
                chatroom_id, EVENTS.MESSAGE_DELETE, {"deletedMessage": deleted}
            )
        )

        cls.get_logger().info(f"User {actor.id} deleted message {message_id}")
        return ServiceResult.success(deleted)

    @classmethod
    def mark_edit_seen(cls, message: Message, actor: User) -> ServiceResult[Message]:
        """
        Acknowledge the latest edit of a message.

        Groups record the actor in edit_seen_by; direct chats flip the owner
        or partner flag. edited_at is never changed.

        Error codes:
            NOT_MEMBER: Actor is not in the chatroom
        """
        chatroom = message.chatroom
        if not chatroom.has_member(actor):
            return ServiceResult.from_error(_not_member())

        if chatroom.is_group:
            message.edit_seen_by.add(actor)
        elif message.sender_id == actor.pk:
            message.edit_seen_by_owner = True
            message.save(update_fields=["edit_seen_by_owner", "updated_at"])
        else:
            message.edit_seen_by_partner = True
            message.save(update_fields=["edit_seen_by_partner", "updated_at"])

        payload = {"updatedMessage": message_payload(message)}
        cls.on_commit(
            lambda: realtime.publish_to_room(
                chatroom.id, EVENTS.MESSAGE_UPDATE, payload
            )
        )

        cls.get_logger().debug(f"User {actor.id} saw edit of message {message.id}")
        return ServiceResult.success(message)
