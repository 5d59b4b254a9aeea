# app/services/inoperative_service.py
"""
Vehicle inoperative periods (repair, maintenance, breakdown, other).
Vehicle.status is set to repair while a period covers today and back to
normal once no active period does.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.database import commit_or_raise, get_or_raise
from app.exceptions import ValidationError
from app.models.enums import InoperativeType, PeriodStatus, VehicleStatus
from app.models.inoperative_period import VehicleInoperativePeriod
from app.models.vehicle import Vehicle
from app.services.interval_store import DateRange
from app.services.notification_service import notify
from app.utils.dates import to_day
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _parse_type(period_type) -> InoperativeType:
    try:
        return InoperativeType(period_type)
    except ValueError:
        raise ValidationError(f"Unknown inoperative type '{period_type}'", field="period_type")


def other_active_period_covers(db: Session, vehicle_id: int, today, exclude_id: Optional[int] = None) -> bool:
    query = db.query(VehicleInoperativePeriod).filter(
        VehicleInoperativePeriod.vehicle_id == vehicle_id,
        VehicleInoperativePeriod.status == PeriodStatus.ACTIVE.value,
        VehicleInoperativePeriod.start_date <= today,
        VehicleInoperativePeriod.end_date >= today,
    )
    if exclude_id is not None:
        query = query.filter(VehicleInoperativePeriod.id != exclude_id)
    return query.first() is not None


async def create_inoperative_period(db: Session, vehicle_id: int, start, end, period_type,
                                    reason: Optional[str], today) -> VehicleInoperativePeriod:
    window = DateRange.of(start, end)
    period_type = _parse_type(period_type)
    today = to_day(today)
    vehicle = get_or_raise(db, Vehicle, vehicle_id, "Vehicle")

    period = VehicleInoperativePeriod(
        vehicle_id=vehicle.id,
        start_date=window.start,
        end_date=window.end,
        period_type=period_type.value,
        reason=reason,
        original_driver_name=vehicle.driver,
        status=PeriodStatus.ACTIVE.value,
        created_at=datetime.utcnow(),
    )
    db.add(period)
    if window.contains(today):
        vehicle.status = VehicleStatus.REPAIR.value
    commit_or_raise(db, "create inoperative period")
    logger.info(
        f"[INOPERATIVE] Period {period.id}: {vehicle.plate_number} {period_type.value} "
        f"{window.start}..{window.end}"
    )

    await notify(db, "inoperative_created",
                 f"{vehicle.plate_number} out of service ({period_type.value}) "
                 f"from {window.start} to {window.end}" + (f": {reason}" if reason else ""),
                 vehicle_id=vehicle.id, priority="high")
    return period


async def complete_inoperative_period(db: Session, period_id: int, today) -> VehicleInoperativePeriod:
    today = to_day(today)
    period = get_or_raise(db, VehicleInoperativePeriod, period_id, "Inoperative period")
    if period.status == PeriodStatus.COMPLETED:
        return period

    period.status = PeriodStatus.COMPLETED.value
    vehicle = db.get(Vehicle, period.vehicle_id)
    if vehicle is not None and not other_active_period_covers(db, vehicle.id, today, exclude_id=period.id):
        vehicle.status = VehicleStatus.NORMAL.value
    commit_or_raise(db, "complete inoperative period")
    logger.info(f"[INOPERATIVE] Period {period.id} completed")

    plate = vehicle.plate_number if vehicle is not None else f"vehicle {period.vehicle_id}"
    await notify(db, "inoperative_completed", f"{plate} back in service ({period.period_type} completed)",
                 vehicle_id=period.vehicle_id)
    return period
