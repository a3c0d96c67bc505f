"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Chatroom, Membership, Message model tests
- test_authorization.py: Role resolution and delete matrix
- test_services.py: Chat service tests
- test_queries.py: Chatroom list and detail payloads
- test_views.py: REST API endpoint tests
- test_realtime.py: Channel layer publishing
- test_consumers.py: WebSocket consumer and middleware tests
- test_client.py: Python client session tests
- test_tasks.py: Celery task tests

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
