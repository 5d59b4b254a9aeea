# app/models/inspection_booking.py
"""
Inspection reservations. Either scheduled_date (single day) or
start_date/end_date (range) is set; the booked days must not pass deadline_date.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey
from app.database import Base


class InspectionBooking(Base):
    __tablename__ = "inspection_bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    plate_number = Column(String(50))
    driver_id = Column(Integer)
    driver_name = Column(String(200))
    scheduled_date = Column(Date)
    start_date = Column(Date)
    end_date = Column(Date)
    deadline_date = Column(Date, nullable=False)
    inspection_kind = Column(String(20), default="regular", nullable=False)  # regular | crane_annual
    status = Column(String(20), default="scheduled", nullable=False, index=True)
    memo = Column(Text)
    reserved_by = Column(String(100))
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<InspectionBooking {self.id} vehicle={self.vehicle_id} status={self.status}>"
