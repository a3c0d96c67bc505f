"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct (1:1) chatrooms between exactly two users
- Group chatrooms with an owner, admins and members

Models:
    Chatroom: Container for messages between members
    Membership: A user's place in a chatroom with role and read state
    DirectChatPair: Helper enforcing one direct chatroom per user pair
    Message: Individual message within a chatroom

Design Decisions:
    - Read state is one Membership.last_seen value per member, so adding a
      member creates its read state and removing the row drops membership,
      admin status and read state together
    - Deleting a user keeps chat history: memberships become ghost rows
      (user NULL) and messages keep a NULL sender
    - Group names are unique among groups; direct pairs are unique per
      unordered user pair. Both are database constraints.
    - Edits are recorded explicitly in Message.edited_at
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from core.models import BaseModel

from chat.constants import EPOCH, GROUP_CONFIG, MESSAGE_CONFIG

if TYPE_CHECKING:
    from authentication.models import User


def epoch():
    """Default last_seen for members that never opened the chatroom."""
    return EPOCH


class MemberRole(models.TextChoices):
    """
    Role within a chatroom.

    Hierarchy: OWNER > ADMIN > MEMBER

    OWNER: Group creator. Promotes/demotes admins, deletes the group, cannot
           leave or be removed
    ADMIN: Invites, removes members, edits group metadata
    MEMBER: Sends messages, deletes own messages, leaves

    Note: Both members of a direct chatroom have role MEMBER.
    """

    OWNER = "owner", "Owner"
    ADMIN = "admin", "Admin"
    MEMBER = "member", "Member"


class MessageType(models.TextChoices):
    """
    Type of message content, derived from the content when saved.

    TEXT: User-authored text message
    IMAGE: Storage URL of an uploaded image
    AUDIO: Storage URL of an uploaded voice message
    SYSTEM: Generated by a group mutation (invite, promote, ...)
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    AUDIO = "audio", "Audio"
    SYSTEM = "system", "System"


def classify_content(content: str, is_system_message: bool = False) -> str:
    """
    Derive the MessageType of a message body.

    Media messages are storage URLs (MEDIA_URL or absolute http(s)) ending in
    a known image or audio suffix; everything else is text.
    """
    if is_system_message:
        return MessageType.SYSTEM

    value = (content or "").strip()
    prefixes = (settings.MEDIA_URL, *MESSAGE_CONFIG.REMOTE_URL_PREFIXES)
    if not value.startswith(prefixes):
        return MessageType.TEXT

    path = value.split("?", 1)[0].lower()
    if path.endswith(MESSAGE_CONFIG.IMAGE_EXTENSIONS):
        return MessageType.IMAGE
    if path.endswith(MESSAGE_CONFIG.AUDIO_EXTENSIONS):
        return MessageType.AUDIO
    return MessageType.TEXT


class Chatroom(BaseModel):
    """
    A chatroom between two or more users.

    Chatroom Kinds:
        Direct: Exactly 2 memberships (one may be a ghost), no group fields.
                Unique per user pair (enforced via DirectChatPair).

        Group: Creator is the owner. Admins and members are added by
               invitation. Name is unique among groups.

    Fields:
        is_group: Whether this is a group chatroom
        name: Group name (empty for direct)
        description: Group description (empty for direct)
        image: Group image URL (null when unset or direct)
        creator: Group creator (null for direct or after account deletion)
        last_activity: Bumped by every membership or metadata change

    Relationships:
        memberships: Membership rows (one per current member)
        messages: All Message records for this chatroom
        direct_pair: DirectChatPair if this is a direct chatroom
    """

    is_group = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether this is a group chatroom",
    )

    name = models.CharField(
        max_length=GROUP_CONFIG.MAX_NAME_LENGTH,
        blank=True,
        default="",
        help_text="Group name (empty for direct chatrooms)",
    )

    description = models.CharField(
        max_length=GROUP_CONFIG.MAX_DESCRIPTION_LENGTH,
        blank=True,
        default="",
        help_text="Group description (empty for direct chatrooms)",
    )

    image = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        help_text="URL of the group image",
    )

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_chatrooms",
        help_text="User who created this group",
    )

    last_activity = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="Timestamp of the most recent membership or metadata change",
    )

    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="Membership",
        related_name="chatrooms",
        blank=True,
    )

    class Meta:
        db_table = "chat_chatroom"
        ordering = ["-last_activity", "-created_at"]
        constraints = [
            # One group per exact (case-sensitive) name
            models.UniqueConstraint(
                fields=["name"],
                condition=Q(is_group=True),
                name="unique_group_name",
            ),
        ]

    def __str__(self) -> str:
        if self.is_group:
            return f"Group: {self.name}"
        return f"Direct({self.pk})"

    def membership_for(self, user: User | None) -> Membership | None:
        """Return the membership row of a user, or None for non-members."""
        if user is None or user.pk is None:
            return None
        return self.memberships.filter(user=user).first()

    def has_member(self, user: User | None) -> bool:
        if user is None or user.pk is None:
            return False
        return self.memberships.filter(user=user).exists()

    def touch(self) -> None:
        """Bump last_activity to now and persist it."""
        self.last_activity = timezone.now()
        self.save(update_fields=["last_activity", "updated_at"])


class Membership(BaseModel):
    """
    A user's membership in a chatroom.

    The row carries the member's role and read state. Deleting it removes the
    user from the chatroom, from its admins, and from its read state in one
    step.

    Fields:
        chatroom: Chatroom this membership belongs to
        user: Member (NULL once the account has been deleted)
        role: OWNER, ADMIN or MEMBER
        last_seen: When the member last marked the chatroom read

    Constraints:
        - UniqueConstraint(chatroom, user): One membership per user per chatroom
    """

    chatroom = models.ForeignKey(
        Chatroom,
        on_delete=models.CASCADE,
        related_name="memberships",
        help_text="Chatroom this membership belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="chat_memberships",
        help_text="Member (null once the account was deleted)",
    )

    role = models.CharField(
        max_length=10,
        choices=MemberRole.choices,
        default=MemberRole.MEMBER,
        db_index=True,
        help_text="Role in the chatroom",
    )

    last_seen = models.DateTimeField(
        default=epoch,
        help_text="Last time the member read the chatroom (for unread counts)",
    )

    class Meta:
        db_table = "chat_membership"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["user", "chatroom"],
                name="chat_member_user_room_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["chatroom", "user"],
                name="unique_chatroom_membership",
            ),
        ]

    def __str__(self) -> str:
        return f"Membership: {self.user_id} in {self.chatroom_id} ({self.role})"

    @property
    def is_ghost(self) -> bool:
        """True when the member's account has been deleted."""
        return self.user_id is None

    @property
    def is_admin(self) -> bool:
        """Owner or admin."""
        return self.role in (MemberRole.OWNER, MemberRole.ADMIN)


class DirectChatPair(models.Model):
    """
    Enforces uniqueness of direct chatrooms between two users.

    User pairs are stored in canonical order (lower user id first), so there
    can only be one direct chatroom per pair regardless of who starts it.

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One chatroom per pair
        - CheckConstraint(user_lower < user_higher): Canonical order

    Deleting either user deletes the pair row; the chatroom itself survives
    with a ghost membership.
    """

    chatroom = models.OneToOneField(
        Chatroom,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct chatroom this pair represents",
    )

    user_lower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower id in this pair",
    )

    user_higher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher id in this pair",
    )

    class Meta:
        db_table = "chat_direct_pair"
        constraints = [
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_chat_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_lower__lt=F("user_higher")),
                name="direct_pair_canonical_order",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"

    @staticmethod
    def ordered(user_a: User, user_b: User) -> tuple[User, User]:
        """Return the two users in canonical (lower id first) order."""
        if user_a.pk < user_b.pk:
            return user_a, user_b
        return user_b, user_a


class Message(BaseModel):
    """
    Individual message within a chatroom.

    Edit tracking:
        edited_at is set only by content edits. Every edit resets the
        edit-seen state: edit_seen_by for groups, edit_seen_by_owner /
        edit_seen_by_partner for direct chatrooms.

    Fields:
        chatroom: Chatroom this message belongs to
        sender: Author (null for some system messages and deleted accounts)
        content: Text or storage URL
        message_type: Derived content type
        is_system_message: Generated by a group mutation
        edited_at: When the content was last edited (null if never)
        edit_seen_by: Group members who acknowledged the latest edit
        edit_seen_by_owner: Direct chat sender acknowledged the latest edit
        edit_seen_by_partner: Direct chat partner acknowledged the latest edit
    """

    chatroom = models.ForeignKey(
        Chatroom,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Chatroom containing this message",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="chat_messages",
        help_text="User who sent this message",
    )

    content = models.TextField(
        help_text="Message text or storage URL",
    )

    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="Type of message content",
    )

    is_system_message = models.BooleanField(
        default=False,
        help_text="Whether this message was generated by a group mutation",
    )

    edited_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the content was last edited (null if never edited)",
    )

    edit_seen_by = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="seen_message_edits",
        help_text="Group members who have seen the latest edit",
    )

    edit_seen_by_owner = models.BooleanField(
        default=False,
        help_text="Direct chat: sender has seen the latest edit",
    )

    edit_seen_by_partner = models.BooleanField(
        default=False,
        help_text="Direct chat: partner has seen the latest edit",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["chatroom", "created_at"],
                name="chat_msg_room_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Message({self.pk}) in {self.chatroom_id}"

    def save(self, *args, **kwargs):
        self.message_type = classify_content(self.content, self.is_system_message)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "content" in update_fields:
            kwargs["update_fields"] = {*update_fields, "message_type"}
        super().save(*args, **kwargs)

    @property
    def is_edited(self) -> bool:
        return self.edited_at is not None
