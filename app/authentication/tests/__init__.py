"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User model and username validators
- test_managers.py: UserManager tests
- test_services.py: AccountService tests
- test_tasks.py: Email task tests
- test_views.py: API endpoint tests

Usage:
    pytest app/authentication/tests/
"""
