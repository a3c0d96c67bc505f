"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- DirectChatViewSet: Find-or-preview, create and delete 1:1 chats
- ChatroomViewSet: Chatroom list, detail and mark-as-read
- GroupChatViewSet: Group lifecycle and membership actions
- MessageViewSet: Send, edit, delete and edit acknowledgement

URL Structure:
    /api/v1/chat/direct/                                POST
    /api/v1/chat/direct/exist/                          POST
    /api/v1/chat/direct/{id}/                           DELETE
    /api/v1/chat/chatrooms/                             GET
    /api/v1/chat/chatrooms/{id}/                        GET
    /api/v1/chat/chatrooms/{id}/read/                   POST
    /api/v1/chat/groups/                                POST
    /api/v1/chat/groups/{id}/                           PATCH, DELETE
    /api/v1/chat/groups/{id}/members/                   GET
    /api/v1/chat/groups/{id}/members/{username}/        DELETE
    /api/v1/chat/groups/{id}/invite/                    POST
    /api/v1/chat/groups/{id}/promote/                   PATCH
    /api/v1/chat/groups/{id}/demote/                    PATCH
    /api/v1/chat/groups/{id}/leave/                     POST
    /api/v1/chat/messages/                              POST
    /api/v1/chat/messages/{id}/                         PATCH, DELETE
    /api/v1/chat/messages/{id}/edit-seen/               POST

Design Decisions:
    - Views validate input with serializers and delegate to the service layer
    - Service failures are raised with result.unwrap() and rendered by
      core.exceptions.api_exception_handler
    - Membership gates on reads use IsChatroomMember; role rules for
      mutations live in the services
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from chat.models import Chatroom, Message
from chat.permissions import IsChatroomMember
from chat.queries import chatroom_detail, list_chatrooms_for_user
from chat.serializers import (
    DirectChatCreateSerializer,
    DirectChatLookupSerializer,
    GroupCreateSerializer,
    GroupUpdateSerializer,
    InviteSerializer,
    MemberTargetSerializer,
    MessageCreateSerializer,
    MessageEditSerializer,
    MessageSerializer,
    message_payload,
)
from chat.services import (
    DirectChatService,
    GroupChatService,
    MessageService,
    ReadStateService,
)


@extend_schema_view(
    create=extend_schema(
        operation_id="create_direct_chat",
        summary="Create direct chat",
        description="Create a 1:1 chat together with its first message.",
        request=DirectChatCreateSerializer,
        responses={201: OpenApiTypes.OBJECT},
        tags=["Chat - Direct"],
    ),
    destroy=extend_schema(
        operation_id="delete_direct_chat",
        summary="Delete direct chat",
        responses={204: None},
        tags=["Chat - Direct"],
    ),
)
class DirectChatViewSet(viewsets.GenericViewSet):
    """
    ViewSet for direct (1:1) chats.

    create:
        Create the chatroom and its first message. The message is pushed on
        both participants' personal channels.

    exist:
        Return the existing chatroom id or a preview of the partner.

    destroy:
        Delete the chatroom and all its messages (any participant).
    """

    permission_classes = [IsAuthenticated]
    queryset = Chatroom.objects.filter(is_group=False)
    lookup_value_regex = r"\d+"

    def create(self, request):
        serializer = DirectChatCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        chatroom = DirectChatService.create(
            current_user=request.user,
            partner_username=serializer.validated_data["partner_username"],
            first_message_content=serializer.validated_data["content"],
        ).unwrap()

        return Response({"chatroom": chatroom.id}, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        chatroom = get_object_or_404(Chatroom, pk=pk)
        DirectChatService.delete(chatroom, request.user).unwrap()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="find_direct_chat",
        summary="Find or preview direct chat",
        request=DirectChatLookupSerializer,
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Direct"],
    )
    @action(detail=False, methods=["post"])
    def exist(self, request):
        serializer = DirectChatLookupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = DirectChatService.find_or_preview(
            request.user, serializer.validated_data["username"]
        ).unwrap()

        return Response(data)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_chatrooms",
        summary="List chatrooms",
        description=(
            "All chatrooms of the current user with last message, unread "
            "count and timestamps, sorted for the chat list."
        ),
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Chatrooms"],
    ),
    retrieve=extend_schema(
        operation_id="get_chatroom",
        summary="Get chatroom",
        description="Messages and metadata of a chatroom (members only).",
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Chatrooms"],
    ),
)
class ChatroomViewSet(viewsets.GenericViewSet):
    """
    ViewSet for reading chatrooms.

    list:
        Chatroom list of the current user. Empty 1:1 chats whose partner
        deleted their account are removed on the way.

    retrieve:
        Chatroom detail with every message, oldest first.

    read:
        Set the caller's last_seen to now.
    """

    permission_classes = [IsAuthenticated, IsChatroomMember]
    queryset = Chatroom.objects.select_related("creator")
    lookup_value_regex = r"\d+"

    def list(self, request):
        return Response(list_chatrooms_for_user(request.user))

    def retrieve(self, request, pk=None):
        chatroom = self.get_object()
        return Response(chatroom_detail(chatroom, request.user))

    @extend_schema(
        operation_id="mark_chatroom_read",
        summary="Mark chatroom as read",
        request=None,
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Chatrooms"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        chatroom = self.get_object()
        now = ReadStateService.mark_read(chatroom, request.user).unwrap()
        return Response({"message": "Successfully updated", "now": now})


@extend_schema_view(
    create=extend_schema(
        operation_id="create_group",
        summary="Create group",
        request=GroupCreateSerializer,
        responses={201: OpenApiTypes.OBJECT},
        tags=["Chat - Groups"],
    ),
    partial_update=extend_schema(
        operation_id="update_group",
        summary="Edit group name or description",
        request=GroupUpdateSerializer,
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Groups"],
    ),
    destroy=extend_schema(
        operation_id="delete_group",
        summary="Delete group",
        responses={204: None},
        tags=["Chat - Groups"],
    ),
)
class GroupChatViewSet(viewsets.GenericViewSet):
    """
    ViewSet for group chats.

    create:
        Create a group owned by the caller, with an optional welcome message.

    partial_update:
        Change name and/or description (owner or admin).

    destroy:
        Delete the group with all its messages (owner).

    members / invite / promote / demote / remove_member / leave:
        Membership operations. Each one posts a system message.
    """

    permission_classes = [IsAuthenticated]
    queryset = Chatroom.objects.filter(is_group=True).select_related("creator")
    lookup_value_regex = r"\d+"

    def create(self, request):
        serializer = GroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        group = GroupChatService.create(
            creator=request.user, **serializer.validated_data
        ).unwrap()

        return Response(
            {"chatroom": group.id, "groupName": group.name},
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, pk=None):
        group = self.get_object()
        serializer = GroupUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        updates = GroupChatService.edit_metadata(
            group, request.user, **serializer.validated_data
        ).unwrap()

        return Response({"groupId": group.id, "updates": updates})

    def destroy(self, request, pk=None):
        group = self.get_object()
        GroupChatService.delete(group, request.user).unwrap()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="list_group_members",
        summary="List group members",
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Groups"],
    )
    @action(detail=True, methods=["get"])
    def members(self, request, pk=None):
        group = self.get_object()
        return Response(GroupChatService.members(group, request.user).unwrap())

    @extend_schema(
        operation_id="invite_group_members",
        summary="Invite users",
        request=InviteSerializer,
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Groups"],
    )
    @action(detail=True, methods=["post"])
    def invite(self, request, pk=None):
        group = self.get_object()
        serializer = InviteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invited = GroupChatService.invite(
            group, request.user, serializer.validated_data["usernames"]
        ).unwrap()

        return Response({"groupId": group.id, "newMembers": invited})

    @extend_schema(
        operation_id="promote_group_member",
        summary="Promote member to admin",
        request=MemberTargetSerializer,
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Groups"],
    )
    @action(detail=True, methods=["patch"])
    def promote(self, request, pk=None):
        group = self.get_object()
        serializer = MemberTargetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        username = serializer.validated_data["username"]
        GroupChatService.promote(group, request.user, username).unwrap()

        return Response({"groupId": group.id, "promotedUser": username})

    @extend_schema(
        operation_id="demote_group_admin",
        summary="Demote admin to member",
        request=MemberTargetSerializer,
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Groups"],
    )
    @action(detail=True, methods=["patch"])
    def demote(self, request, pk=None):
        group = self.get_object()
        serializer = MemberTargetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        username = serializer.validated_data["username"]
        GroupChatService.demote(group, request.user, username).unwrap()

        return Response({"groupId": group.id, "demotedUser": username})

    @extend_schema(
        operation_id="remove_group_member",
        summary="Remove member",
        request=None,
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Groups"],
    )
    @action(
        detail=True,
        methods=["delete"],
        url_path=r"members/(?P<username>[^/]+)",
        url_name="remove-member",
    )
    def remove_member(self, request, pk=None, username=None):
        group = self.get_object()
        removed = GroupChatService.remove_member(group, request.user, username).unwrap()
        return Response({"groupId": group.id, "removedUser": removed})

    @extend_schema(
        operation_id="leave_group",
        summary="Leave group",
        request=None,
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Groups"],
    )
    @action(detail=True, methods=["post"])
    def leave(self, request, pk=None):
        group = self.get_object()
        GroupChatService.leave(group, request.user).unwrap()
        return Response({"groupId": group.id, "leftUser": request.user.username})


@extend_schema_view(
    create=extend_schema(
        operation_id="send_message",
        summary="Send message",
        request=MessageCreateSerializer,
        responses={201: MessageSerializer},
        tags=["Chat - Messages"],
    ),
    partial_update=extend_schema(
        operation_id="edit_message",
        summary="Edit message",
        request=MessageEditSerializer,
        responses={200: MessageSerializer},
        tags=["Chat - Messages"],
    ),
    destroy=extend_schema(
        operation_id="delete_message",
        summary="Delete message",
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Messages"],
    ),
)
class MessageViewSet(viewsets.GenericViewSet):
    """
    ViewSet for message operations.

    create:
        Send a message to a chatroom the caller belongs to.

    partial_update:
        Edit own message content. Resets edit-seen state.

    destroy:
        Delete a message. Direct chats: sender only. Groups: sender, owner,
        or an admin for messages of plain members.

    edit_seen:
        Acknowledge the latest edit of a message.
    """

    permission_classes = [IsAuthenticated]
    queryset = Message.objects.select_related("chatroom", "sender")
    lookup_value_regex = r"\d+"

    def create(self, request):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        chatroom = get_object_or_404(Chatroom, pk=serializer.validated_data["chatroom"])
        message = MessageService.send(
            chatroom, request.user, serializer.validated_data["content"]
        ).unwrap()

        return Response(message_payload(message), status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        message = self.get_object()
        serializer = MessageEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = MessageService.edit(
            message, request.user, serializer.validated_data["content"]
        ).unwrap()

        return Response({"updatedMessage": message_payload(message)})

    def destroy(self, request, pk=None):
        message = self.get_object()
        deleted = MessageService.delete(message, request.user).unwrap()
        return Response({"deletedMessage": deleted})

    @extend_schema(
        operation_id="mark_message_edit_seen",
        summary="Mark message edit as seen",
        request=None,
        responses={200: OpenApiTypes.OBJECT},
        tags=["Chat - Messages"],
    )
    @action(detail=True, methods=["post"], url_path="edit-seen", url_name="edit-seen")
    def edit_seen(self, request, pk=None):
        message = self.get_object()
        message = MessageService.mark_edit_seen(message, request.user).unwrap()
        return Response({"updatedMessage": message_payload(message)})
