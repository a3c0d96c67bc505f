"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/                 - Personal channel only (chat list refresh)
    ws/chat/<chatroom_id>/   - A chatroom plus the personal channel

Authentication:
    JWT access token via ?token=<jwt> or the "jwt, <token>" subprotocol.
    JWTAuthMiddleware validates it and attaches the user to the scope.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path("ws/chat/", consumers.ChatConsumer.as_asgi()),
    path("ws/chat/<int:chatroom_id>/", consumers.ChatConsumer.as_asgi()),
]
