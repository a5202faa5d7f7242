from __future__ import annotations

from celery import shared_task
from celery.utils.log import get_task_logger


logger = get_task_logger(__name__)


@shared_task(bind=True)
def deliver_notification(self, user_id: int, title: str, message: str, kind: str = 'system', related_id: str = '') -> dict:
    # Lazy import keeps worker boot light
    from django.contrib.auth.models import User
    from .models import Notification

    if not User.objects.filter(pk=user_id).exists():
        logger.warning("Skipping notification for missing user %s", user_id)
        return {'delivered': False, 'user_id': user_id}

    notification = Notification.objects.create(
        user_id=user_id,
        title=title[:100],
        message=message[:500],
        kind=kind,
        related_id=str(related_id or ''),
    )
    logger.info("Delivered notification %s to user %s", notification.id, user_id)
    return {'delivered': True, 'notification_id': notification.id}
