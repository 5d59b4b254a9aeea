# app/models/vacation_settings.py
"""
Process-wide vacation quota settings (single row).
Limit tables are stored as JSON; version increments on every update.
"""

from sqlalchemy import Column, Integer, DateTime, JSON
from app.database import Base


class VacationSettingsRecord(Base):
    __tablename__ = "vacation_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    version = Column(Integer, default=1, nullable=False)
    minimum_off_days_per_month = Column(Integer, nullable=False)
    maximum_off_days_per_month = Column(Integer, nullable=False)
    notification_day = Column(Integer, nullable=False)
    global_max_drivers_off_per_day = Column(Integer, nullable=False)
    max_drivers_off_per_day = Column(JSON, nullable=False)         # {team: int}
    team_monthly_weekday_limits = Column(JSON, nullable=False)     # {team: {month: {weekday: int}}}
    specific_date_limits = Column(JSON, nullable=False)            # {yyyy-mm-dd: {team: int}}
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<VacationSettings v{self.version}>"
