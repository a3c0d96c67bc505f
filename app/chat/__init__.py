"""
Chat app for real-time messaging.

This app handles:
- Direct and group chatrooms
- Message sending, editing and deletion
- Read state and unread counts
- WebSocket real-time updates

Related apps:
    - authentication: User model for members
    - media: Image and voice uploads referenced by message content

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.
    See client.py for the Python client session.

Usage:
    from chat.services import DirectChatService, MessageService

    chatroom = DirectChatService.create(alice, "bob", "Hi Bob").unwrap()
    MessageService.send(chatroom, bob, "Hi Alice").unwrap()
"""
