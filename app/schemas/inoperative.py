# app/schemas/inoperative.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional


class InoperativePeriodCreate(BaseModel):
    vehicle_id: int
    start_date: date
    end_date: date
    period_type: str         # repair | maintenance | breakdown | other
    reason: Optional[str] = None


class InoperativePeriodOut(BaseModel):
    id: int
    vehicle_id: int
    start_date: date
    end_date: date
    period_type: str
    reason: Optional[str]
    original_driver_name: Optional[str]
    status: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
