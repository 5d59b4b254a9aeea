# app/schemas/notification.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class NotificationOut(BaseModel):
    id: int
    notification_type: str
    vehicle_id: Optional[int]
    driver_id: Optional[int]
    message: str
    priority: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
