# app/models/assignment_change.py
"""One-off driver substitutions for a single day or a short bounded range."""

from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, Text, ForeignKey
from app.database import Base


class VehicleAssignmentChange(Base):
    __tablename__ = "vehicle_assignment_changes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    end_date = Column(Date)                               # inclusive; NULL = single day
    original_driver_id = Column(Integer)
    original_driver_name = Column(String(200))
    new_driver_id = Column(Integer, ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False)
    new_driver_name = Column(String(200), nullable=False)
    reason = Column(Text)
    is_temporary = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(100))
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<AssignmentChange {self.id} vehicle={self.vehicle_id} date={self.date}>"
