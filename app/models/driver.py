# app/models/driver.py
"""
Drivers. The employee id prefix distinguishes internal and external drivers.
assigned_vehicle_id is the structural (long-term) vehicle assignment.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from app.database import Base


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    employee_id = Column(String(50), unique=True, nullable=False)
    team = Column(String(100), nullable=False, index=True)
    assigned_vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="SET NULL"))
    status = Column(String(20), default="working", nullable=False)
    is_night_shift = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Driver {self.employee_id} name={self.name} team={self.team}>"
