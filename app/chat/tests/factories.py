"""
Factory Boy factories for chat models.

Provides realistic test data generation for:
- Chatroom: Direct and group chatrooms
- Membership: User membership with role and read state
- Message: Text and system messages

Usage:
    from chat.tests.factories import (
        DirectChatFactory,
        GroupChatFactory,
        MembershipFactory,
        MessageFactory,
    )

    # Group with its creator as owner
    group = GroupChatFactory()

    # Direct chatroom between two users
    chatroom = DirectChatFactory(user1=alice, user2=bob)

    # Message in a chatroom
    message = MessageFactory(chatroom=chatroom, sender=alice)
"""

import factory

from authentication.tests.factories import UserFactory
from chat.constants import EPOCH
from chat.models import Chatroom, DirectChatPair, MemberRole, Membership, Message


class ChatroomFactory(factory.django.DjangoModelFactory):
    """
    Base factory for Chatroom model.

    Creates a bare group chatroom without memberships.
    Use GroupChatFactory or DirectChatFactory for complete chatrooms.
    """

    class Meta:
        model = Chatroom
        skip_postgeneration_save = True

    is_group = True
    name = factory.Sequence(lambda n: f"Group Chat {n}")
    description = ""
    creator = factory.SubFactory(UserFactory)


class GroupChatFactory(ChatroomFactory):
    """
    Factory for group chatrooms with an owner membership.

    Examples:
        group = GroupChatFactory()
        group = GroupChatFactory(creator=alice, name="Team")
    """

    @factory.post_generation
    def add_owner(self, create, extracted, **kwargs):
        """Add the creator as owner after the chatroom is created."""
        if not create or self.creator is None:
            return
        MembershipFactory(chatroom=self, user=self.creator, role=MemberRole.OWNER)


class DirectChatFactory(factory.django.DjangoModelFactory):
    """
    Factory for direct (1:1) chatrooms.

    Creates the chatroom, its DirectChatPair and two memberships with
    last_seen at the epoch.

    Examples:
        chatroom = DirectChatFactory()
        chatroom = DirectChatFactory(user1=alice, user2=bob)
    """

    class Meta:
        model = Chatroom

    is_group = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Create direct chatroom with memberships and pair."""
        user1 = kwargs.pop("user1", None) or UserFactory()
        user2 = kwargs.pop("user2", None) or UserFactory()

        user_lower, user_higher = DirectChatPair.ordered(user1, user2)

        chatroom = super()._create(model_class, *args, **kwargs)
        DirectChatPair.objects.create(
            chatroom=chatroom, user_lower=user_lower, user_higher=user_higher
        )
        MembershipFactory(chatroom=chatroom, user=user1)
        MembershipFactory(chatroom=chatroom, user=user2)
        return chatroom


class MembershipFactory(factory.django.DjangoModelFactory):
    """
    Factory for Membership model.

    Examples:
        MembershipFactory(chatroom=group, user=bob)
        MembershipFactory(chatroom=group, user=carol, role=MemberRole.ADMIN)
    """

    class Meta:
        model = Membership

    chatroom = factory.SubFactory(ChatroomFactory)
    user = factory.SubFactory(UserFactory)
    role = MemberRole.MEMBER
    last_seen = EPOCH


class MessageFactory(factory.django.DjangoModelFactory):
    """
    Factory for Message model.

    Examples:
        message = MessageFactory(chatroom=chatroom, sender=user)
        message = MessageFactory(content="/media/images/cat.png")
    """

    class Meta:
        model = Message
        skip_postgeneration_save = True

    chatroom = factory.SubFactory(GroupChatFactory)
    sender = factory.SubFactory(UserFactory)
    content = factory.Faker("sentence")
    is_system_message = False


class SystemMessageFactory(MessageFactory):
    """Factory for system messages emitted by group mutations."""

    sender = None
    content = "alice has left the group"
    is_system_message = True
