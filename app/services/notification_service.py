# app/services/notification_service.py
"""
Shared notification service.
Used by the inoperative, assignment and inspection write paths.

Persists a human-readable Notification and, when NOTIFY_WEBHOOK_URL is set,
posts it to the webhook. Best effort: a failure is logged, never raised, so
the write that triggered it always stands.
"""

from datetime import datetime
from typing import Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.notification import Notification
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def notify(db: Session, notification_type: str, message: str, vehicle_id: Optional[int] = None,
                 driver_id: Optional[int] = None, priority: str = "medium") -> Optional[Notification]:
    """Create and persist a notification, then push it to the webhook if configured."""
    notification = Notification(notification_type=notification_type, vehicle_id=vehicle_id,
                                driver_id=driver_id, message=message, priority=priority,
                                is_read=False, created_at=datetime.utcnow())
    try:
        db.add(notification)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"[NOTIFY] Could not store {notification_type} notification: {e}")
        return None

    logger.info(f"[NOTIFY][{notification_type.upper()}] {message}")
    if settings.NOTIFY_WEBHOOK_URL:
        await _push(notification)
    return notification


async def _push(notification: Notification):
    payload = {
        "id": notification.id,
        "type": notification.notification_type,
        "vehicle_id": notification.vehicle_id,
        "driver_id": notification.driver_id,
        "message": notification.message,
        "priority": notification.priority,
        "created_at": notification.created_at.isoformat(),
    }
    try:
        async with httpx.AsyncClient(timeout=settings.NOTIFY_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.NOTIFY_WEBHOOK_URL, json=payload)
        if response.status_code >= 400:
            logger.warning(f"[NOTIFY] Webhook returned HTTP {response.status_code} for notification {notification.id}")
    except httpx.HTTPError as e:
        logger.warning(f"[NOTIFY] Webhook delivery failed for notification {notification.id}: {e}")
