# app/services/inspection_service.py
"""
Inspection reservations. A booking is either one scheduled_date or a full
start/end range, and every booked day must be on or before the deadline.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.database import commit_or_raise, get_or_raise
from app.exceptions import ValidationError
from app.models.driver import Driver
from app.models.enums import BookingStatus, InspectionKind
from app.models.inspection_booking import InspectionBooking
from app.models.vehicle import Vehicle
from app.services.interval_store import DateRange
from app.services.notification_service import notify
from app.utils.dates import optional_day, to_day
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _booked_range(scheduled_date, start_date, end_date) -> DateRange:
    scheduled, start, end = optional_day(scheduled_date), optional_day(start_date), optional_day(end_date)
    if scheduled is not None and (start is not None or end is not None):
        raise ValidationError("Give either scheduled_date or start_date/end_date, not both",
                              field="scheduled_date")
    if scheduled is not None:
        return DateRange(scheduled, scheduled)
    if start is None or end is None:
        raise ValidationError("A booking needs scheduled_date or both start_date and end_date",
                              field="start_date")
    return DateRange(start, end)


async def create_booking(db: Session, vehicle_id: int, deadline, scheduled_date=None, start_date=None,
                         end_date=None, kind=InspectionKind.REGULAR, memo: Optional[str] = None,
                         reserved_by: Optional[str] = None) -> InspectionBooking:
    booked = _booked_range(scheduled_date, start_date, end_date)
    deadline = to_day(deadline)
    if booked.end > deadline:
        raise ValidationError(
            f"Booking ends {booked.end} after the inspection deadline {deadline}", field="deadline_date"
        )
    try:
        kind = InspectionKind(kind)
    except ValueError:
        raise ValidationError(f"Unknown inspection kind '{kind}'", field="inspection_kind")
    vehicle = get_or_raise(db, Vehicle, vehicle_id, "Vehicle")
    driver = db.query(Driver).filter(Driver.assigned_vehicle_id == vehicle.id).first()

    single = scheduled_date is not None
    booking = InspectionBooking(
        vehicle_id=vehicle.id,
        plate_number=vehicle.plate_number,
        driver_id=driver.id if driver else None,
        driver_name=driver.name if driver else vehicle.driver,
        scheduled_date=booked.start if single else None,
        start_date=None if single else booked.start,
        end_date=None if single else booked.end,
        deadline_date=deadline,
        inspection_kind=kind.value,
        status=BookingStatus.SCHEDULED.value,
        memo=memo,
        reserved_by=reserved_by,
        created_at=datetime.utcnow(),
    )
    db.add(booking)
    commit_or_raise(db, "create inspection booking")
    logger.info(f"[INSPECTION] Booking {booking.id}: {vehicle.plate_number} {booked.start}..{booked.end} "
                f"(deadline {deadline})")

    when = str(booked.start) if booked.start == booked.end else f"{booked.start} to {booked.end}"
    await notify(db, "inspection_reserved", f"{vehicle.plate_number} inspection reserved for {when}",
                 vehicle_id=vehicle.id, driver_id=booking.driver_id)
    return booking


def _transition(db: Session, booking_id: int, target: BookingStatus) -> InspectionBooking:
    booking = get_or_raise(db, InspectionBooking, booking_id, "Inspection booking")
    if booking.status != BookingStatus.SCHEDULED:
        raise ValidationError(f"Booking {booking_id} is already {booking.status}", field="status")
    booking.status = target.value
    commit_or_raise(db, f"{target.value} inspection booking")
    logger.info(f"[INSPECTION] Booking {booking_id} {target.value}")
    return booking


async def cancel_booking(db: Session, booking_id: int) -> InspectionBooking:
    booking = _transition(db, booking_id, BookingStatus.CANCELLED)
    await notify(db, "inspection_cancelled",
                 f"{booking.plate_number or booking.vehicle_id} inspection reservation cancelled",
                 vehicle_id=booking.vehicle_id, driver_id=booking.driver_id)
    return booking


def complete_booking(db: Session, booking_id: int) -> InspectionBooking:
    return _transition(db, booking_id, BookingStatus.COMPLETED)
