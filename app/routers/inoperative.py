# app/routers/inoperative.py
"""Vehicle inoperative periods."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from app.database import get_db
from app.models.inoperative_period import VehicleInoperativePeriod
from app.schemas.inoperative import InoperativePeriodCreate, InoperativePeriodOut
from app.services.inoperative_service import complete_inoperative_period, create_inoperative_period

router = APIRouter()


@router.get("/inoperative", response_model=list[InoperativePeriodOut], summary="Inoperative periods")
def list_periods(vehicle_id: Optional[int] = None, status: Optional[str] = None, db: Session = Depends(get_db)):
    q = db.query(VehicleInoperativePeriod)
    if vehicle_id is not None:
        q = q.filter(VehicleInoperativePeriod.vehicle_id == vehicle_id)
    if status:
        q = q.filter(VehicleInoperativePeriod.status == status)
    return q.order_by(VehicleInoperativePeriod.start_date.desc()).all()


@router.post("/inoperative", response_model=InoperativePeriodOut, summary="Take a vehicle out of service")
async def add_period(body: InoperativePeriodCreate, db: Session = Depends(get_db)):
    return await create_inoperative_period(db, body.vehicle_id, body.start_date, body.end_date,
                                           body.period_type, body.reason, date.today())


@router.post("/inoperative/{period_id}/complete", response_model=InoperativePeriodOut,
             summary="Mark an inoperative period completed")
async def complete_period(period_id: int, db: Session = Depends(get_db)):
    return await complete_inoperative_period(db, period_id, date.today())
