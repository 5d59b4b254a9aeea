# app/models/vacation_request.py
"""
One work-status record per (driver, calendar date).
(driver_id, date) is the natural key; writes upsert on it.
team is denormalized at creation time and never re-derived.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, UniqueConstraint
from app.database import Base


class VacationRequest(Base):
    __tablename__ = "vacation_requests"
    __table_args__ = (
        UniqueConstraint("driver_id", "date", name="uq_vacation_driver_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(Integer, ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True)
    driver_name = Column(String(200), nullable=False)
    employee_id = Column(String(50), nullable=False)
    team = Column(String(100), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    work_status = Column(String(20), nullable=False)     # working | day_off | night_shift
    is_off = Column(Boolean, default=False, nullable=False)
    is_external_driver = Column(Boolean, default=False, nullable=False)
    reason = Column(String(200))
    request_date = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<VacationRequest driver={self.driver_id} date={self.date} status={self.work_status}>"
