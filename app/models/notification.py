# app/models/notification.py
"""
Notification log — human-readable messages emitted when inoperative periods,
reassignments and inspection reservations are created or cancelled.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from app.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    notification_type = Column(String(50), nullable=False, index=True)
    vehicle_id = Column(Integer)
    driver_id = Column(Integer)
    message = Column(Text, nullable=False)
    priority = Column(String(10), default="medium", nullable=False)   # low | medium | high
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Notification {self.id} type={self.notification_type} read={self.is_read}>"
