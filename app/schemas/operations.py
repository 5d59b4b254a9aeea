# app/schemas/operations.py
from pydantic import BaseModel
from datetime import date
from app.models.enums import OperationStatus


class InactiveVehicleOut(BaseModel):
    vehicle_id: int
    plate_number: str
    status: OperationStatus
    reason: str

    class Config:
        from_attributes = True


class DaySummaryOut(BaseModel):
    date: date
    in_month: bool
    total_vehicles: int
    inactive_count: int
    vacation_count: int
    inspection_due_count: int
    reservation_completed_count: int
    inactive_vehicles: list[InactiveVehicleOut]

    class Config:
        from_attributes = True


class BookingConflictOut(BaseModel):
    vehicle_id: int
    date: date
    kept_booking_id: int
    rejected_booking_id: int

    class Config:
        from_attributes = True


class MonthViewOut(BaseModel):
    year: int
    month: int
    days: list[DaySummaryOut]
    conflicts: list[BookingConflictOut]

    class Config:
        from_attributes = True


class SweepFailureOut(BaseModel):
    record_type: str
    record_id: int
    error: str

    class Config:
        from_attributes = True


class SweepReportOut(BaseModel):
    today: date
    periods_completed: list[int]
    assignments_restored: list[int]
    periods_started: list[int]
    assignments_started: list[int]
    failures: list[SweepFailureOut]

    class Config:
        from_attributes = True
