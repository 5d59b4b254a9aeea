# app/schemas/assignment.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional


class TemporaryAssignmentCreate(BaseModel):
    driver_id: int
    vehicle_id: int
    start_date: date
    end_date: date
    created_by: Optional[str] = None


class TemporaryAssignmentOut(BaseModel):
    id: int
    driver_id: int
    driver_name: str
    vehicle_id: int
    start_date: date
    end_date: date
    original_driver_name: Optional[str]
    created_by: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class AssignmentChangeCreate(BaseModel):
    vehicle_id: int
    date: date
    new_driver_id: int
    end_date: Optional[date] = None
    reason: Optional[str] = None
    is_temporary: bool = True
    created_by: Optional[str] = None


class AssignmentChangeOut(BaseModel):
    id: int
    vehicle_id: int
    date: date
    end_date: Optional[date]
    original_driver_id: Optional[int]
    original_driver_name: Optional[str]
    new_driver_id: int
    new_driver_name: str
    reason: Optional[str]
    is_temporary: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
