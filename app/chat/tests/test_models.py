"""
Tests for chat model constraints and computed properties.

This module tests:
- Chatroom: Group name uniqueness, membership helpers, touch()
- DirectChatPair: Uniqueness and canonical ordering constraints
- Membership: Uniqueness, ghost rows after account deletion
- Message: Content classification, edit state, deleted senders

Test Organization:
    - Each model has its own test class
    - Tests use descriptive names following: test_<scenario>_<expected_outcome>
"""

from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction
from django.test import override_settings
from django.utils import timezone
from freezegun import freeze_time

from authentication.tests.factories import UserFactory
from chat.constants import EPOCH
from chat.models import (
    Chatroom,
    DirectChatPair,
    MemberRole,
    Membership,
    Message,
    MessageType,
    classify_content,
)
from chat.tests.factories import (
    ChatroomFactory,
    DirectChatFactory,
    GroupChatFactory,
    MembershipFactory,
    MessageFactory,
    SystemMessageFactory,
)


# =============================================================================
# TestChatroom
# =============================================================================


class TestChatroom:
    """Tests for Chatroom model."""

    def test_group_names_are_unique(self, db):
        """
        Two groups cannot share a name.

        Why it matters: The database constraint backs the GROUP_EXISTS check
        when two creates race.
        """
        ChatroomFactory(name="Team")

        with pytest.raises(IntegrityError), transaction.atomic():
            ChatroomFactory(name="Team")

    def test_group_name_uniqueness_is_case_sensitive(self, db):
        ChatroomFactory(name="Team")
        ChatroomFactory(name="team")

        assert Chatroom.objects.filter(is_group=True).count() == 2

    def test_direct_chatrooms_do_not_collide_on_empty_name(self, db):
        DirectChatFactory()
        DirectChatFactory()

        assert Chatroom.objects.filter(is_group=False).count() == 2

    def test_has_member_and_membership_for(self, db, group, member_user, outsider_user):
        assert group.has_member(member_user) is True
        assert group.has_member(outsider_user) is False
        assert group.membership_for(member_user).role == MemberRole.MEMBER
        assert group.membership_for(outsider_user) is None
        assert group.membership_for(None) is None

    def test_touch_bumps_last_activity(self, db, group):
        later = timezone.now() + timedelta(hours=1)

        with freeze_time(later):
            group.touch()

        group.refresh_from_db()
        assert group.last_activity == later

    def test_str_distinguishes_kinds(self, db, group, direct_chat):
        assert str(group) == "Group: Team"
        assert str(direct_chat) == f"Direct({direct_chat.pk})"


# =============================================================================
# TestDirectChatPair
# =============================================================================


class TestDirectChatPair:
    """Tests for DirectChatPair model."""

    def test_ordered_returns_lower_id_first(self, db):
        first = UserFactory()
        second = UserFactory()

        assert DirectChatPair.ordered(second, first) == (first, second)
        assert DirectChatPair.ordered(first, second) == (first, second)

    def test_pair_is_unique(self, db):
        """
        One direct chatroom per user pair.

        Why it matters: Concurrent direct-chat creates must not produce two
        chatrooms for the same pair.
        """
        user1 = UserFactory()
        user2 = UserFactory()
        DirectChatFactory(user1=user1, user2=user2)

        lower, higher = DirectChatPair.ordered(user1, user2)
        with pytest.raises(IntegrityError), transaction.atomic():
            DirectChatPair.objects.create(
                chatroom=Chatroom.objects.create(is_group=False),
                user_lower=lower,
                user_higher=higher,
            )

    def test_pair_must_be_in_canonical_order(self, db):
        user1 = UserFactory()
        user2 = UserFactory()
        lower, higher = DirectChatPair.ordered(user1, user2)

        with pytest.raises(IntegrityError), transaction.atomic():
            DirectChatPair.objects.create(
                chatroom=Chatroom.objects.create(is_group=False),
                user_lower=higher,
                user_higher=lower,
            )


# =============================================================================
# TestMembership
# =============================================================================


class TestMembership:
    """Tests for Membership model."""

    def test_defaults_to_member_role_and_epoch_last_seen(self, db):
        membership = Membership.objects.create(
            chatroom=ChatroomFactory(), user=UserFactory()
        )

        assert membership.role == MemberRole.MEMBER
        assert membership.last_seen == EPOCH
        assert membership.is_admin is False

    def test_one_membership_per_user(self, db, group, member_user):
        with pytest.raises(IntegrityError), transaction.atomic():
            MembershipFactory(chatroom=group, user=member_user)

    def test_owner_and_admin_are_admins(self, db, group, owner_user, admin_user):
        assert group.membership_for(owner_user).is_admin is True
        assert group.membership_for(admin_user).is_admin is True

    def test_deleting_account_leaves_ghost_membership(self, db, direct_chat, member_user):
        """
        Account deletion keeps the chatroom with a ghost member.

        Why it matters: The remaining partner still sees the history, and
        the chat list flags it as a deleted account.
        """
        member_user.delete()

        memberships = list(direct_chat.memberships.all())
        assert len(memberships) == 2
        assert sum(m.is_ghost for m in memberships) == 1
        assert not DirectChatPair.objects.filter(chatroom=direct_chat).exists()


# =============================================================================
# TestMessage
# =============================================================================


class TestMessage:
    """Tests for Message model."""

    def test_plain_text_is_text(self, db):
        assert MessageFactory(content="hello").message_type == MessageType.TEXT

    @override_settings(MEDIA_URL="/media/")
    def test_storage_image_url_is_image(self, db):
        message = MessageFactory(content="/media/images/cat.PNG")

        assert message.message_type == MessageType.IMAGE

    def test_remote_audio_url_is_audio(self, db):
        message = MessageFactory(content="https://cdn.example.com/voice/a.webm?x=1")

        assert message.message_type == MessageType.AUDIO

    def test_text_mentioning_filename_stays_text(self, db):
        assert classify_content("look at cat.png") == MessageType.TEXT

    def test_system_message_type(self, db):
        assert SystemMessageFactory().message_type == MessageType.SYSTEM

    def test_editing_content_reclassifies(self, db):
        message = MessageFactory(content="hello")

        message.content = "https://cdn.example.com/a.jpg"
        message.save(update_fields=["content"])

        message.refresh_from_db()
        assert message.message_type == MessageType.IMAGE

    def test_is_edited_follows_edited_at(self, db):
        message = MessageFactory()
        assert message.is_edited is False

        message.edited_at = timezone.now()
        assert message.is_edited is True

    def test_messages_are_ordered_oldest_first(self, db, group, owner_user):
        with freeze_time("2024-01-01 10:00"):
            first = MessageFactory(chatroom=group, sender=owner_user)
        with freeze_time("2024-01-01 09:00"):
            earlier = MessageFactory(chatroom=group, sender=owner_user)

        assert list(group.messages.all()) == [earlier, first]

    def test_deleting_sender_keeps_message(self, db, group, member_user):
        message = MessageFactory(chatroom=group, sender=member_user)

        member_user.delete()

        message.refresh_from_db()
        assert message.sender is None
        assert Message.objects.filter(pk=message.pk).exists()

    def test_deleting_chatroom_deletes_messages(self, db, group, owner_user):
        MessageFactory(chatroom=group, sender=owner_user)

        group.delete()

        assert Message.objects.count() == 0
