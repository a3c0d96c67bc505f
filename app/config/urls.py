"""
URL configuration for the chat backend.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - Authentication endpoints
        register/                  - Create an unverified account
        verify/                    - Confirm the emailed verification key
        login/                     - Email/password login (JWT pair)
        token/refresh/             - Rotate refresh token
        password/forgot/           - Email a password reset key
        password/reset/            - Set a new password with the key
        me/                        - Current user (GET/PATCH/DELETE)
    /api/v1/chat/                  - Chat endpoints
        direct/                    - Create direct chat
        direct/exist/              - Find existing direct chat or preview
        direct/{id}/               - Delete direct chat
        chatrooms/                 - Chatroom list
        chatrooms/{id}/            - Chatroom detail with messages
        chatrooms/{id}/read/       - Mark chatroom as read
        groups/                    - Create group
        groups/{id}/               - Edit/delete group
        groups/{id}/members/       - Group members and permissions
        groups/{id}/members/{username}/ - Remove member
        groups/{id}/invite|promote|demote|leave/ - Membership actions
        messages/                  - Send message
        messages/{id}/             - Edit/delete message
        messages/{id}/edit-seen/   - Acknowledge edit
    /api/v1/media/                 - Upload endpoints
        upload/image/              - Chat image
        upload/audio/              - Voice message
        upload/avatar/             - Current user's avatar
        upload/group-image/{id}/   - Group image

WebSocket routes live in chat/routing.py and are mounted by config/asgi.py.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("chat/", include("chat.urls")),
    path("media/", include("media.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# Serve uploads from MEDIA_ROOT during local development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Chat Admin"
admin.site.site_title = "Chat Admin Portal"
admin.site.index_title = "Chatrooms, members and messages"
