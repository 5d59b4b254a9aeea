# app/schemas/vacation.py
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional


class LimitOut(BaseModel):
    date: date
    team: str
    limit: int
    rule: str                # specific_date | team_monthly_weekday | team_default | global_default
    detail: str


class DriverDayOffRequest(BaseModel):
    driver_id: int
    date: date
    reason: Optional[str] = None


class WorkStatusUpdate(BaseModel):
    driver_id: int
    date: date
    work_status: str         # working | day_off | night_shift
    reason: Optional[str] = None


class BulkWorkStatusUpdate(BaseModel):
    date: date
    work_status: str
    team: Optional[str] = None            # all drivers of this team ...
    driver_ids: list[int] = []            # ... or an explicit selection


class VacationRequestOut(BaseModel):
    id: int
    driver_id: int
    driver_name: str
    employee_id: str
    team: str
    date: date
    work_status: str
    is_off: bool
    is_external_driver: bool
    reason: Optional[str]
    request_date: datetime

    class Config:
        from_attributes = True


class MonthlyStatsOut(BaseModel):
    driver_id: int
    year: int
    month: int
    total_off_days: int
    required_minimum: int
    remaining_required: int
    maximum_allowed: int

    class Config:
        from_attributes = True


class VacationSettingsIn(BaseModel):
    global_max_drivers_off_per_day: int = Field(3, ge=0)
    minimum_off_days_per_month: int = Field(9, ge=0)
    maximum_off_days_per_month: int = Field(12, ge=0)
    notification_day: int = Field(25, ge=1, le=31)
    max_drivers_off_per_day: dict[str, int] = {}
    team_monthly_weekday_limits: dict[str, dict[str, dict[str, int]]] = {}   # team -> month -> weekday
    specific_date_limits: dict[str, dict[str, int]] = {}                     # YYYY-MM-DD -> team


class VacationSettingsOut(VacationSettingsIn):
    version: int
