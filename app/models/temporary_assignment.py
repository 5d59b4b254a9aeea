# app/models/temporary_assignment.py
"""
Multi-day temporary driver assignments.
original_driver_name snapshots the vehicle's driver at creation and is
restored by the expiry sweep once end_date has passed.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey
from app.database import Base


class TemporaryAssignment(Base):
    __tablename__ = "temporary_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(Integer, ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True)
    driver_name = Column(String(200), nullable=False)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)
    original_driver_name = Column(String(200))
    created_by = Column(String(100))
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<TemporaryAssignment {self.id} driver={self.driver_id} vehicle={self.vehicle_id}>"
