"""
OpenAPI schema customizations for drf-spectacular.

This module provides hooks to customize the generated OpenAPI schema,
including tag groupings for better documentation organization in ReDoc.

Tag naming follows the pattern: [App Name] - [Group Name]
Examples:
- Auth - Account (current user settings and deletion)
- Chat - Groups (group lifecycle and membership)
- Media - Upload (file uploads)
"""

# Natural language summaries for simplejwt views, which carry no
# extend_schema of their own. Maps operation_id to (summary, description).
TOKEN_SUMMARIES = {
    "auth_token_refresh_create": (
        "Refresh access token",
        "Get a new access token using a valid refresh token. The refresh "
        "token is rotated and the old one blacklisted.",
    ),
}

TAG_DESCRIPTIONS = [
    {
        "name": "Auth",
        "description": "Registration, verification, login, password reset and token refresh.",
    },
    {
        "name": "Auth - Account",
        "description": "Current user retrieval, preference updates and account deletion.",
    },
    {
        "name": "Chat - Direct",
        "description": "1:1 chats: find-or-preview, create with a first message, delete.",
    },
    {
        "name": "Chat - Chatrooms",
        "description": "Chatroom list, chatroom detail with messages, mark as read.",
    },
    {
        "name": "Chat - Groups",
        "description": "Group lifecycle and membership: invite, promote, demote, remove, leave.",
    },
    {
        "name": "Chat - Messages",
        "description": "Send, edit and delete messages; acknowledge edits.",
    },
    {
        "name": "Media - Upload",
        "description": "Image, audio, avatar and group image uploads returning a storage URL.",
    },
]


def group_auth_endpoints(result, generator, request, public):
    """
    Postprocessing hook to group API endpoints by function.

    Chat and media views set tags= in @extend_schema. Auth operations that
    come from third-party views (token refresh) are tagged here, get
    natural language summaries, and every tag gets a description.
    """
    paths = result.get("paths", {})

    for path, methods in paths.items():
        for method, operation in methods.items():
            if not isinstance(operation, dict):
                continue

            operation_id = operation.get("operationId", "")

            if operation_id in TOKEN_SUMMARIES:
                summary, description = TOKEN_SUMMARIES[operation_id]
                operation["summary"] = summary
                operation["description"] = description

            if operation_id.startswith("auth_token_"):
                operation["tags"] = ["Auth"]

    result["tags"] = TAG_DESCRIPTIONS

    return result
