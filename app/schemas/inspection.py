# app/schemas/inspection.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional
from app.models.enums import InspectionKind


class InspectionBookingCreate(BaseModel):
    vehicle_id: int
    deadline_date: date
    scheduled_date: Optional[date] = None     # single day ...
    start_date: Optional[date] = None         # ... or a range
    end_date: Optional[date] = None
    inspection_kind: str = "regular"          # regular | crane_annual
    memo: Optional[str] = None
    reserved_by: Optional[str] = None


class InspectionBookingOut(BaseModel):
    id: int
    vehicle_id: int
    plate_number: Optional[str]
    driver_id: Optional[int]
    driver_name: Optional[str]
    scheduled_date: Optional[date]
    start_date: Optional[date]
    end_date: Optional[date]
    deadline_date: date
    inspection_kind: str
    status: str
    memo: Optional[str]
    reserved_by: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class InspectionAlertOut(BaseModel):
    vehicle_id: int
    plate_number: str
    kind: InspectionKind
    due_date: date
    days_until: int
    urgency: str             # urgent | warning

    class Config:
        from_attributes = True
