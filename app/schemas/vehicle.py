# app/schemas/vehicle.py
from pydantic import BaseModel
from datetime import date
from typing import Optional
from app.models.enums import OperationStatus


class VehicleOut(BaseModel):
    id: int
    plate_number: str
    model: str
    team: str
    garage: Optional[str] = None
    driver: Optional[str] = None
    status: str
    last_inspection_date: Optional[date] = None
    next_inspection_date: Optional[date] = None
    crane_annual_inspection_date: Optional[date] = None

    class Config:
        from_attributes = True


class VehicleStatusOut(BaseModel):
    vehicle_id: int
    date: date
    status: OperationStatus
    reason: str
    assigned_driver_name: str
    original_driver_name: Optional[str] = None

    class Config:
        from_attributes = True


class UnassignedVehicleOut(BaseModel):
    vehicle_id: int
    plate_number: str
    team: str
    reason: str              # no structural driver | driver on vacation


class DriverOut(BaseModel):
    id: int
    name: str
    employee_id: str
    team: str
    assigned_vehicle_id: Optional[int] = None
    status: str
    is_night_shift: bool
    is_external: bool = False

    class Config:
        from_attributes = True
