"""
URL configuration for chat API.

URL Structure:
    Direct chats:
        /direct/                            POST
        /direct/exist/                      POST
        /direct/{id}/                       DELETE

    Chatrooms:
        /chatrooms/                         GET
        /chatrooms/{id}/                    GET
        /chatrooms/{id}/read/               POST

    Groups:
        /groups/                            POST
        /groups/{id}/                       PATCH, DELETE
        /groups/{id}/members/               GET
        /groups/{id}/members/{username}/    DELETE
        /groups/{id}/invite/                POST
        /groups/{id}/promote/               PATCH
        /groups/{id}/demote/                PATCH
        /groups/{id}/leave/                 POST

    Messages:
        /messages/                          POST
        /messages/{id}/                     PATCH, DELETE
        /messages/{id}/edit-seen/           POST

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from chat.views import (
    ChatroomViewSet,
    DirectChatViewSet,
    GroupChatViewSet,
    MessageViewSet,
)

router = DefaultRouter()
router.register(r"direct", DirectChatViewSet, basename="direct")
router.register(r"chatrooms", ChatroomViewSet, basename="chatroom")
router.register(r"groups", GroupChatViewSet, basename="group")
router.register(r"messages", MessageViewSet, basename="message")

app_name = "chat"

urlpatterns = [
    path("", include(router.urls)),
]
