"""
Chat application configuration.

This app provides the chat system with:
- Direct (1:1) and group chatrooms
- Role-based group management (owner, admin, member)
- Message editing with edit acknowledgement
- Per-member read state and unread counts
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
