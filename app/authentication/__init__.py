"""
Authentication application.

This app provides the chat user account: email login with JWT tokens,
key-based account verification, password reset and user preferences.

Key components:
    - User model: Email-based user with a public username
    - AccountService: Registration, verification and settings logic
    - tasks: Verification and password reset emails

Usage:
    from authentication.models import User
    from authentication.services import AccountService
"""
