"""
Celery tasks for chat app.

This module defines async tasks for:
- Orphaned direct chat cleanup

Related files:
    - queries.py: Removes the same chatrooms lazily when a list is read
    - config/settings.py: CELERY_BEAT_SCHEDULE entry

Usage:
    from chat.tasks import sweep_orphaned_direct_chats

    sweep_orphaned_direct_chats.delay()
"""

import logging

from celery import shared_task
from django.db.models import Count, Q

logger = logging.getLogger(__name__)


@shared_task
def sweep_orphaned_direct_chats() -> int:
    """
    Delete direct chatrooms that lost a partner and never had messages.

    A direct chatroom is orphaned when fewer than two of its memberships
    still point at an account and it holds no messages.

    Returns:
        Number of chatrooms deleted
    """
    from chat.models import Chatroom

    orphaned = (
        Chatroom.objects.filter(is_group=False)
        .annotate(
            live_members=Count(
                "memberships",
                filter=Q(memberships__user__isnull=False),
                distinct=True,
            ),
            message_count=Count("messages", distinct=True),
        )
        .filter(live_members__lt=2, message_count=0)
    )

    ids = list(orphaned.values_list("id", flat=True))
    if not ids:
        return 0

    Chatroom.objects.filter(id__in=ids).delete()
    logger.info(f"Deleted {len(ids)} orphaned direct chatrooms")
    return len(ids)
