# app/models/inoperative_period.py
"""
Whole-day, inclusive periods during which a vehicle is out of service.
Transitions active -> completed by explicit completion or by the expiry sweep.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey
from app.database import Base


class VehicleInoperativePeriod(Base):
    __tablename__ = "vehicle_inoperative_periods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)
    period_type = Column(String(20), nullable=False)      # repair | maintenance | breakdown | other
    reason = Column(Text)
    original_driver_name = Column(String(200))
    status = Column(String(20), default="active", nullable=False, index=True)  # active | completed
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<InoperativePeriod {self.id} vehicle={self.vehicle_id} {self.start_date}..{self.end_date} {self.status}>"
