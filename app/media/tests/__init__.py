"""
Tests for media app.

This package contains test modules for:
- test_processors.py: Pillow pad/fill transforms
- test_validators.py: Upload type and size rules
- test_services.py: StorageService
- test_views.py: Upload endpoints
"""
