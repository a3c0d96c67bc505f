"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Chatroom management
- Membership viewing
- Message moderation
"""

from django.contrib import admin

from chat.models import Chatroom, DirectChatPair, Membership, Message


class MembershipInline(admin.TabularInline):
    """Inline display of memberships in chatroom admin."""

    model = Membership
    extra = 0
    readonly_fields = ["created_at", "last_seen"]
    raw_id_fields = ["user"]


@admin.register(Chatroom)
class ChatroomAdmin(admin.ModelAdmin):
    """Admin interface for Chatroom model."""

    list_display = [
        "id",
        "is_group",
        "name",
        "creator",
        "last_activity",
        "created_at",
    ]
    list_filter = ["is_group", "created_at"]
    search_fields = ["name", "id"]
    readonly_fields = ["created_at", "updated_at", "last_activity"]
    raw_id_fields = ["creator"]
    inlines = [MembershipInline]
    ordering = ["-last_activity"]


@admin.register(DirectChatPair)
class DirectChatPairAdmin(admin.ModelAdmin):
    """Admin interface for DirectChatPair model."""

    list_display = ["chatroom", "user_lower", "user_higher"]
    raw_id_fields = ["chatroom", "user_lower", "user_higher"]


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    """Admin interface for Membership model."""

    list_display = ["id", "chatroom", "user", "role", "last_seen", "created_at"]
    list_filter = ["role", "created_at"]
    search_fields = ["user__email", "user__username", "chatroom__name"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["chatroom", "user"]
    ordering = ["-created_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "chatroom",
        "sender",
        "message_type",
        "content_preview",
        "is_system_message",
        "edited_at",
        "created_at",
    ]
    list_filter = ["message_type", "is_system_message", "created_at"]
    search_fields = ["content", "sender__username"]
    readonly_fields = ["created_at", "updated_at", "edited_at", "message_type"]
    raw_id_fields = ["chatroom", "sender"]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        max_length = 50
        if len(obj.content) > max_length:
            return obj.content[:max_length] + "..."
        return obj.content
