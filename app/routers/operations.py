# app/routers/operations.py
"""
Daily operations — status board, vehicles needing a driver, drivers free for
a temporary assignment, the month calendar, and a manual expiry sweep.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from app.database import get_db
from app.schemas.operations import MonthViewOut, SweepReportOut
from app.schemas.vehicle import DriverOut, UnassignedVehicleOut, VehicleStatusOut
from app.services.availability_resolver import available_drivers_for, unassigned_vehicles_for
from app.services.calendar_aggregator import month_view
from app.services.expiry_sweep import run_sweep_locked
from app.services.interval_store import DateRange
from app.services.snapshots import load_context
from app.services.vehicle_status_resolver import resolve_all
from app.utils.dates import month_grid

router = APIRouter()


@router.get("/operations/status", response_model=list[VehicleStatusOut], summary="Status of every vehicle on a day")
def operations_status(day: Optional[date] = Query(None, alias="date"), db: Session = Depends(get_db)):
    day = day or date.today()
    return resolve_all(day, load_context(db, day, day))


@router.get("/operations/unassigned-vehicles", response_model=list[UnassignedVehicleOut],
            summary="Vehicles without a driver on a day")
def unassigned_vehicles(day: Optional[date] = Query(None, alias="date"), db: Session = Depends(get_db)):
    day = day or date.today()
    return [
        UnassignedVehicleOut(vehicle_id=u.vehicle.id, plate_number=u.vehicle.plate_number,
                             team=u.vehicle.team, reason=u.reason)
        for u in unassigned_vehicles_for(day, load_context(db, day, day))
    ]


@router.get("/operations/available-drivers", response_model=list[DriverOut],
            summary="Drivers free for a temporary assignment")
def available_drivers(day: Optional[date] = Query(None, alias="date"), end_date: Optional[date] = None,
                      db: Session = Depends(get_db)):
    day = day or date.today()
    window = DateRange.of(day, end_date)
    drivers = available_drivers_for(window.start, load_context(db, window.start, window.end), window.end)
    return [DriverOut.model_validate(d, from_attributes=True) for d in drivers]


@router.get("/operations/calendar", response_model=MonthViewOut, summary="Month calendar with per-day counts")
def calendar(year: int = Query(..., ge=2000, le=2100), month: int = Query(..., ge=1, le=12),
             db: Session = Depends(get_db)):
    grid = month_grid(year, month)
    return month_view(year, month, load_context(db, grid[0], grid[-1]))


@router.post("/operations/sweep", response_model=SweepReportOut, summary="Run one expiry sweep pass now")
def sweep_now(db: Session = Depends(get_db)):
    report = run_sweep_locked(db, date.today())
    if report is None:
        raise HTTPException(status_code=409, detail="An expiry sweep pass is already running")
    return report
