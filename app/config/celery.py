"""
Celery configuration for the chat backend.

Celery runs the background work of the project:
- Verification and password reset emails (authentication.tasks)
- Periodic sweep of orphaned direct chats (chat.tasks), scheduled by beat

The broker and result backend come from CELERY_BROKER_URL and
CELERY_RESULT_BACKEND. Tasks are auto-discovered from all installed apps.

Usage:
    # Start a worker and the beat scheduler:
    celery -A config worker -l info
    celery -A config beat -l info

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Celery will look for a tasks.py module in each installed app
app.autodiscover_tasks()
