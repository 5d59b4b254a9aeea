# app/routers/notifications.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.notification import Notification
from app.schemas.notification import NotificationOut
from typing import Optional

router = APIRouter()

@router.get("/notifications", response_model=list[NotificationOut], summary="Notification log — filterable by type")
def get_notifications(
    notification_type: Optional[str] = None,
    vehicle_id: Optional[int] = None,
    is_read: Optional[bool] = None,
    limit: int = 50,
    db: Session = Depends(get_db)
):
    """Most recent first. Filter by notification_type, vehicle_id or is_read."""
    q = db.query(Notification)
    if notification_type:
        q = q.filter(Notification.notification_type == notification_type)
    if vehicle_id is not None:
        q = q.filter(Notification.vehicle_id == vehicle_id)
    if is_read is not None:
        q = q.filter(Notification.is_read == is_read)
    return q.order_by(Notification.created_at.desc()).limit(limit).all()
