# app/routers/inspections.py
"""Inspection reservations and due-date alerts."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from app.database import get_db
from app.models.vehicle import Vehicle
from app.schemas.inspection import InspectionAlertOut, InspectionBookingCreate, InspectionBookingOut
from app.services.inspection_schedule import inspection_alerts
from app.services.inspection_service import cancel_booking, complete_booking, create_booking
from app.services.snapshots import VehicleSnapshot

router = APIRouter()


@router.post("/inspections", response_model=InspectionBookingOut, summary="Reserve an inspection")
async def add_booking(body: InspectionBookingCreate, db: Session = Depends(get_db)):
    return await create_booking(db, body.vehicle_id, body.deadline_date, body.scheduled_date, body.start_date,
                                body.end_date, body.inspection_kind, body.memo, body.reserved_by)


@router.post("/inspections/{booking_id}/cancel", response_model=InspectionBookingOut, summary="Cancel a reservation")
async def cancel(booking_id: int, db: Session = Depends(get_db)):
    return await cancel_booking(db, booking_id)


@router.post("/inspections/{booking_id}/complete", response_model=InspectionBookingOut,
             summary="Mark a reservation completed")
def complete(booking_id: int, db: Session = Depends(get_db)):
    return complete_booking(db, booking_id)


@router.get("/inspections/alerts", response_model=list[InspectionAlertOut], summary="Overdue and upcoming inspections")
def alerts(day: Optional[date] = Query(None, alias="date"), db: Session = Depends(get_db)):
    vehicles = [VehicleSnapshot.from_model(v) for v in db.query(Vehicle).all()]
    return inspection_alerts(vehicles, day or date.today())
