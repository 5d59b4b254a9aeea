# app/services/assignment_service.py
"""
Temporary assignments (multi-day) and assignment changes (one-off substitutions).

A temporary assignment snapshots the vehicle's driver as original_driver_name.
While today is inside the window the vehicle shows the temporary driver; the
expiry sweep or an explicit delete puts the original back.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.database import commit_or_raise, get_or_raise
from app.exceptions import ValidationError
from app.models.assignment_change import VehicleAssignmentChange
from app.models.driver import Driver
from app.models.temporary_assignment import TemporaryAssignment
from app.models.vehicle import Vehicle
from app.services.availability_resolver import available_drivers_for
from app.services.interval_store import DateRange
from app.services.notification_service import notify
from app.services.snapshots import load_context
from app.services.vehicle_driver import assign_driver, restore_driver
from app.utils.dates import optional_day, to_day
from app.utils.logger import get_logger

logger = get_logger(__name__)


# ── Temporary assignments ────────────────────────────────────────────────────

async def create_temporary_assignment(db: Session, driver_id: int, vehicle_id: int, start, end,
                                      created_by: Optional[str], today) -> TemporaryAssignment:
    window = DateRange.of(start, end)
    today = to_day(today)
    driver = get_or_raise(db, Driver, driver_id, "Driver")
    vehicle = get_or_raise(db, Vehicle, vehicle_id, "Vehicle")

    context = load_context(db, window.start, window.end)
    if context.temporary_by_vehicle.overlapping(vehicle.id, window):
        raise ValidationError(
            f"Vehicle {vehicle.plate_number} already has a temporary assignment between "
            f"{window.start} and {window.end}",
            field="vehicle_id",
        )
    if driver.id not in {d.id for d in available_drivers_for(window.start, context, window.end)}:
        raise ValidationError(
            f"Driver {driver.name} is not available from {window.start} to {window.end}",
            field="driver_id",
        )

    assignment = TemporaryAssignment(
        driver_id=driver.id,
        driver_name=driver.name,
        vehicle_id=vehicle.id,
        start_date=window.start,
        end_date=window.end,
        original_driver_name=context.base_driver_name(context.vehicle(vehicle.id)),
        created_by=created_by or "system",
        created_at=datetime.utcnow(),
    )
    db.add(assignment)
    if window.contains(today):
        assign_driver(vehicle, driver.name)
    commit_or_raise(db, "create temporary assignment")
    logger.info(
        f"[ASSIGN] Temporary assignment {assignment.id}: {driver.name} on {vehicle.plate_number} "
        f"{window.start}..{window.end} (original {assignment.original_driver_name or '-'})"
    )

    await notify(db, "temporary_assignment",
                 f"{driver.name} temporarily assigned to {vehicle.plate_number} "
                 f"from {window.start} to {window.end}",
                 vehicle_id=vehicle.id, driver_id=driver.id)
    return assignment


async def delete_temporary_assignment(db: Session, assignment_id: int, today):
    today = to_day(today)
    assignment = get_or_raise(db, TemporaryAssignment, assignment_id, "Temporary assignment")
    vehicle = db.get(Vehicle, assignment.vehicle_id)
    in_force = to_day(assignment.start_date) <= today <= to_day(assignment.end_date)
    if vehicle is not None and in_force:
        restore_driver(vehicle, assignment.original_driver_name)
    driver_name, vehicle_id, driver_id = assignment.driver_name, assignment.vehicle_id, assignment.driver_id
    db.delete(assignment)
    commit_or_raise(db, "delete temporary assignment")
    logger.info(f"[ASSIGN] Temporary assignment {assignment_id} deleted")

    plate = vehicle.plate_number if vehicle is not None else f"vehicle {vehicle_id}"
    await notify(db, "temporary_assignment_cancelled",
                 f"Temporary assignment of {driver_name} to {plate} cancelled",
                 vehicle_id=vehicle_id, driver_id=driver_id)


# ── Assignment changes ───────────────────────────────────────────────────────

async def create_assignment_change(db: Session, vehicle_id: int, day, new_driver_id: int,
                                   reason: Optional[str] = None, end_date: Optional[date] = None,
                                   is_temporary: bool = True,
                                   created_by: Optional[str] = None) -> VehicleAssignmentChange:
    window = DateRange.of(day, end_date)
    vehicle = get_or_raise(db, Vehicle, vehicle_id, "Vehicle")
    new_driver = get_or_raise(db, Driver, new_driver_id, "Driver")

    context = load_context(db, window.start, window.end)
    structural = context.structural_driver(context.vehicle(vehicle.id))
    if structural is not None and structural.id == new_driver.id:
        raise ValidationError(f"{new_driver.name} already drives {vehicle.plate_number}",
                              field="new_driver_id")

    change = VehicleAssignmentChange(
        vehicle_id=vehicle.id,
        date=window.start,
        end_date=optional_day(end_date),
        original_driver_id=structural.id if structural else None,
        original_driver_name=(structural.name if structural
                              else context.base_driver_name(context.vehicle(vehicle.id))),
        new_driver_id=new_driver.id,
        new_driver_name=new_driver.name,
        reason=reason,
        is_temporary=is_temporary,
        created_by=created_by or "system",
        created_at=datetime.utcnow(),
    )
    db.add(change)
    commit_or_raise(db, "create assignment change")
    logger.info(
        f"[ASSIGN] Assignment change {change.id}: {vehicle.plate_number} "
        f"{change.original_driver_name or '-'} → {new_driver.name} on {window.start}..{window.end}"
    )

    await notify(db, "reassignment",
                 f"{vehicle.plate_number} reassigned to {new_driver.name} on {window.start}"
                 + (f" until {window.end}" if window.end != window.start else ""),
                 vehicle_id=vehicle.id, driver_id=new_driver.id)
    return change


async def delete_assignment_change(db: Session, change_id: int):
    change = get_or_raise(db, VehicleAssignmentChange, change_id, "Assignment change")
    vehicle_id, driver_id, driver_name, day = change.vehicle_id, change.new_driver_id, change.new_driver_name, change.date
    db.delete(change)
    commit_or_raise(db, "delete assignment change")
    logger.info(f"[ASSIGN] Assignment change {change_id} deleted")

    await notify(db, "reassignment_cancelled",
                 f"Reassignment of vehicle {vehicle_id} to {driver_name} on {day} cancelled",
                 vehicle_id=vehicle_id, driver_id=driver_id)
