# app/routers/vehicles.py
"""Vehicles — list and resolved operational status for one day."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from app.database import get_db, get_or_raise
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleOut, VehicleStatusOut
from app.services.snapshots import VehicleSnapshot, load_context
from app.services.vehicle_status_resolver import resolve

router = APIRouter()


@router.get("/vehicles", response_model=list[VehicleOut], summary="List vehicles")
def list_vehicles(team: Optional[str] = None, db: Session = Depends(get_db)):
    q = db.query(Vehicle)
    if team:
        q = q.filter(Vehicle.team == team)
    return q.order_by(Vehicle.plate_number).all()


@router.get("/vehicles/{vehicle_id}/status", response_model=VehicleStatusOut,
            summary="Resolved status of one vehicle on a day")
def vehicle_status(vehicle_id: int, day: Optional[date] = Query(None, alias="date"), db: Session = Depends(get_db)):
    """Defaults to today."""
    day = day or date.today()
    vehicle = get_or_raise(db, Vehicle, vehicle_id, "Vehicle")
    context = load_context(db, day, day)
    return resolve(VehicleSnapshot.from_model(vehicle), day, context)
