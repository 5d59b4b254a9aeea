# app/services/expiry_sweep.py
"""
Expiry sweep — completes inoperative periods and removes temporary assignments
whose end date has passed, restoring the vehicle's state. The same pass then
applies records that have come into force: a temporary assignment covering
today puts its driver on the vehicle, an active period covering today puts the
vehicle in repair.

Every transition is a conditional write (status still active / row still
present / vehicle field not yet set), so two sweeps over the same data never
apply a change twice, and a second pass over already-swept data changes
nothing. A failure on one record is logged and the sweep moves on to the next.

The background loop runs one pass at startup and then every
SWEEP_INTERVAL_SECONDS, each pass in a worker thread with its own session.
"""

import asyncio
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.database import SessionLocal
from app.models.enums import PeriodStatus, VehicleStatus
from app.models.inoperative_period import VehicleInoperativePeriod
from app.models.temporary_assignment import TemporaryAssignment
from app.models.vehicle import Vehicle
from app.services.inoperative_service import other_active_period_covers
from app.services.vehicle_driver import assign_driver, restore_driver
from app.utils.logger import get_logger

logger = get_logger(__name__)

# One pass at a time inside this process
_sweep_lock = threading.Lock()


@dataclass
class SweepFailure:
    record_type: str
    record_id: int
    error: str


@dataclass
class SweepReport:
    today: date
    periods_completed: list[int] = field(default_factory=list)
    assignments_restored: list[int] = field(default_factory=list)
    periods_started: list[int] = field(default_factory=list)
    assignments_started: list[int] = field(default_factory=list)
    failures: list[SweepFailure] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.periods_completed or self.assignments_restored
                    or self.periods_started or self.assignments_started)


# ── Expiry ───────────────────────────────────────────────────────────────────

def _complete_period(db: Session, period_id: int, vehicle_id: int, today: date) -> bool:
    updated = (
        db.query(VehicleInoperativePeriod)
        .filter(VehicleInoperativePeriod.id == period_id,
                VehicleInoperativePeriod.status == PeriodStatus.ACTIVE.value)
        .update({VehicleInoperativePeriod.status: PeriodStatus.COMPLETED.value}, synchronize_session=False)
    )
    if updated != 1:
        db.rollback()
        return False
    if not other_active_period_covers(db, vehicle_id, today):
        (
            db.query(Vehicle)
            .filter(Vehicle.id == vehicle_id, Vehicle.status != VehicleStatus.NORMAL.value)
            .update({Vehicle.status: VehicleStatus.NORMAL.value}, synchronize_session=False)
        )
    db.commit()
    return True


def _restore_assignment(db: Session, assignment_id: int, vehicle_id: int,
                        original_driver_name: Optional[str]) -> bool:
    deleted = (
        db.query(TemporaryAssignment)
        .filter(TemporaryAssignment.id == assignment_id)
        .delete(synchronize_session=False)
    )
    if deleted != 1:
        db.rollback()
        return False
    vehicle = db.get(Vehicle, vehicle_id)
    if vehicle is not None:
        restore_driver(vehicle, original_driver_name)
    db.commit()
    return True


# ── Activation ───────────────────────────────────────────────────────────────

def _start_period(db: Session, vehicle_id: int) -> bool:
    updated = (
        db.query(Vehicle)
        .filter(Vehicle.id == vehicle_id, Vehicle.status != VehicleStatus.REPAIR.value)
        .update({Vehicle.status: VehicleStatus.REPAIR.value}, synchronize_session=False)
    )
    if updated != 1:
        db.rollback()
        return False
    db.commit()
    return True


def _start_assignment(db: Session, assignment_id: int, vehicle_id: int, driver_name: str) -> bool:
    still_present = db.query(TemporaryAssignment.id).filter(TemporaryAssignment.id == assignment_id).first()
    vehicle = db.get(Vehicle, vehicle_id)
    if still_present is None or vehicle is None or vehicle.driver == driver_name:
        return False
    assign_driver(vehicle, driver_name)
    db.commit()
    return True


def run_sweep(db: Session, today: date) -> SweepReport:
    report = SweepReport(today=today)

    expired_periods = (
        db.query(VehicleInoperativePeriod.id, VehicleInoperativePeriod.vehicle_id)
        .filter(VehicleInoperativePeriod.status == PeriodStatus.ACTIVE.value,
                VehicleInoperativePeriod.end_date < today)
        .order_by(VehicleInoperativePeriod.id)
        .all()
    )
    for period_id, vehicle_id in expired_periods:
        try:
            if _complete_period(db, period_id, vehicle_id, today):
                report.periods_completed.append(period_id)
                logger.info(f"[SWEEP] Inoperative period {period_id} completed (vehicle {vehicle_id})")
        except Exception as e:
            db.rollback()
            report.failures.append(SweepFailure("inoperative_period", period_id, str(e)))
            logger.error(f"[SWEEP] Could not complete inoperative period {period_id}: {e}", exc_info=True)

    expired_assignments = (
        db.query(TemporaryAssignment.id, TemporaryAssignment.vehicle_id, TemporaryAssignment.original_driver_name)
        .filter(TemporaryAssignment.end_date < today)
        .order_by(TemporaryAssignment.id)
        .all()
    )
    for assignment_id, vehicle_id, original_driver_name in expired_assignments:
        try:
            if _restore_assignment(db, assignment_id, vehicle_id, original_driver_name):
                report.assignments_restored.append(assignment_id)
                logger.info(f"[SWEEP] Temporary assignment {assignment_id} expired, "
                            f"vehicle {vehicle_id} restored to {original_driver_name or '-'}")
        except Exception as e:
            db.rollback()
            report.failures.append(SweepFailure("temporary_assignment", assignment_id, str(e)))
            logger.error(f"[SWEEP] Could not restore temporary assignment {assignment_id}: {e}", exc_info=True)

    # Expiry runs first so a record starting today wins over one that ended yesterday.
    starting_periods = (
        db.query(VehicleInoperativePeriod.id, VehicleInoperativePeriod.vehicle_id)
        .filter(VehicleInoperativePeriod.status == PeriodStatus.ACTIVE.value,
                VehicleInoperativePeriod.start_date <= today,
                VehicleInoperativePeriod.end_date >= today)
        .order_by(VehicleInoperativePeriod.id)
        .all()
    )
    for period_id, vehicle_id in starting_periods:
        try:
            if _start_period(db, vehicle_id):
                report.periods_started.append(period_id)
                logger.info(f"[SWEEP] Inoperative period {period_id} in force, vehicle {vehicle_id} in repair")
        except Exception as e:
            db.rollback()
            report.failures.append(SweepFailure("inoperative_period", period_id, str(e)))
            logger.error(f"[SWEEP] Could not start inoperative period {period_id}: {e}", exc_info=True)

    starting_assignments = (
        db.query(TemporaryAssignment.id, TemporaryAssignment.vehicle_id, TemporaryAssignment.driver_name)
        .filter(TemporaryAssignment.start_date <= today, TemporaryAssignment.end_date >= today)
        .order_by(TemporaryAssignment.id)
        .all()
    )
    for assignment_id, vehicle_id, driver_name in starting_assignments:
        try:
            if _start_assignment(db, assignment_id, vehicle_id, driver_name):
                report.assignments_started.append(assignment_id)
                logger.info(f"[SWEEP] Temporary assignment {assignment_id} in force, "
                            f"vehicle {vehicle_id} driven by {driver_name}")
        except Exception as e:
            db.rollback()
            report.failures.append(SweepFailure("temporary_assignment", assignment_id, str(e)))
            logger.error(f"[SWEEP] Could not start temporary assignment {assignment_id}: {e}", exc_info=True)

    if report.changed or report.failures:
        logger.info(
            f"[SWEEP] Done for {today}: {len(report.periods_completed)} periods completed, "
            f"{len(report.assignments_restored)} assignments restored, "
            f"{len(report.periods_started)} periods started, "
            f"{len(report.assignments_started)} assignments started, {len(report.failures)} failures"
        )
    return report


def run_sweep_locked(db: Session, today: date) -> Optional[SweepReport]:
    """run_sweep under the process lock. Returns None if a pass is already running."""
    if not _sweep_lock.acquire(blocking=False):
        logger.info("[SWEEP] Previous pass still running, skipping")
        return None
    try:
        return run_sweep(db, today)
    finally:
        _sweep_lock.release()


def run_sweep_once(today: Optional[date] = None) -> Optional[SweepReport]:
    """One locked pass with a fresh session."""
    db = SessionLocal()
    try:
        return run_sweep_locked(db, today or date.today())
    finally:
        db.close()


async def start_sweep_scheduler(interval_seconds: Optional[int] = None):
    """
    Background loop. Called once at startup as an asyncio task;
    the blocking pass runs in a worker thread so requests are never held up.
    """
    interval = interval_seconds or settings.SWEEP_INTERVAL_SECONDS
    logger.info(f"🧹 Expiry sweep scheduled every {interval}s")

    if not settings.SWEEP_ON_STARTUP:
        await asyncio.sleep(interval)

    while True:
        try:
            await asyncio.to_thread(run_sweep_once)
        except Exception as e:
            logger.error(f"[SWEEP] Pass failed: {e}", exc_info=True)
        await asyncio.sleep(interval)
