# app/services/vacation_service.py
"""
Vacation write paths and per-driver statistics.

Driver self-service: day_off only, at least DRIVER_REQUEST_LEAD_DAYS ahead.
Admin: any work status, no lead time; bulk actions validate every team
before writing anything.
Every day_off write is checked through quota_resolver.check_quota.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.database import commit_or_raise
from app.exceptions import NotFoundError, ValidationError
from app.models.driver import Driver
from app.models.enums import WorkStatus
from app.models.vacation_request import VacationRequest
from app.services.quota_resolver import check_batch, check_quota
from app.services.settings_store import get_settings
from app.services.snapshots import VacationRecord, VacationSettingsSnapshot, is_external_employee
from app.utils.dates import month_bounds, to_day
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MonthlyVacationStats:
    driver_id: int
    year: int
    month: int
    total_off_days: int
    required_minimum: int
    remaining_required: int
    maximum_allowed: int


def _parse_status(status) -> WorkStatus:
    try:
        return WorkStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown work status '{status}'", field="work_status")


def _records_on(db: Session, day: date) -> list[VacationRecord]:
    rows = db.query(VacationRequest).filter(VacationRequest.date == day).all()
    return [VacationRecord.from_model(r) for r in rows]


def _find(db: Session, driver_id: int, day: date) -> Optional[VacationRequest]:
    return (
        db.query(VacationRequest)
        .filter(VacationRequest.driver_id == driver_id, VacationRequest.date == day)
        .first()
    )


def _upsert(db: Session, driver: Driver, day: date, status: WorkStatus,
            reason: Optional[str] = None) -> VacationRequest:
    """Write the (driver, day) record, replacing any earlier one."""
    request = _find(db, driver.id, day)
    if request is None:
        request = VacationRequest(driver_id=driver.id, date=day)
        db.add(request)
    request.driver_name = driver.name
    request.employee_id = driver.employee_id
    request.team = driver.team
    request.work_status = status.value
    request.is_off = status == WorkStatus.DAY_OFF
    request.is_external_driver = is_external_employee(driver.employee_id)
    request.reason = reason
    request.request_date = datetime.utcnow()
    return request


def _check_lead_time(day: date, today: date):
    earliest = today + timedelta(days=settings.DRIVER_REQUEST_LEAD_DAYS)
    if day < earliest:
        raise ValidationError(
            f"Day-off changes must be made at least {settings.DRIVER_REQUEST_LEAD_DAYS} days ahead "
            f"(earliest {earliest.isoformat()})",
            field="date",
        )


def _check_one(db: Session, driver: Driver, day: date):
    check_quota(
        day, driver.team, _records_on(db, day), get_settings(db),
        requester_is_external=is_external_employee(driver.employee_id),
        exclude_driver_ids=[driver.id],
    )


# ── Driver self-service ──────────────────────────────────────────────────────

def submit_driver_day_off(db: Session, driver: Driver, day, today, reason: Optional[str] = None) -> VacationRequest:
    day, today = to_day(day), to_day(today)
    _check_lead_time(day, today)
    _check_one(db, driver, day)
    request = _upsert(db, driver, day, WorkStatus.DAY_OFF, reason)
    commit_or_raise(db, "submit day off")
    logger.info(f"[VACATION] {driver.name} ({driver.team}) requested day off on {day}")
    return request


def delete_driver_day_off(db: Session, driver: Driver, day, today):
    day, today = to_day(day), to_day(today)
    _check_lead_time(day, today)
    request = _find(db, driver.id, day)
    if request is None or request.work_status != WorkStatus.DAY_OFF:
        raise NotFoundError("Day-off request", f"{driver.id}/{day.isoformat()}")
    db.delete(request)
    commit_or_raise(db, "delete day off")
    logger.info(f"[VACATION] {driver.name} withdrew day off on {day}")


# ── Admin ────────────────────────────────────────────────────────────────────

def set_work_status(db: Session, driver: Driver, day, status, reason: Optional[str] = None) -> VacationRequest:
    day = to_day(day)
    status = _parse_status(status)
    if status == WorkStatus.DAY_OFF:
        _check_one(db, driver, day)
    request = _upsert(db, driver, day, status, reason)
    commit_or_raise(db, "set work status")
    logger.info(f"[VACATION] {driver.name} set to {status.value} on {day}")
    return request


def bulk_set_team_status(db: Session, drivers: Iterable[Driver], day, status) -> list[VacationRequest]:
    """
    Set one status for many drivers on one day. For day_off every affected
    team is validated first; nothing is written unless all of them pass.
    """
    day = to_day(day)
    status = _parse_status(status)
    drivers = list(drivers)
    if not drivers:
        raise ValidationError("No drivers selected", field="driver_ids")

    if status == WorkStatus.DAY_OFF:
        existing = _records_on(db, day)
        vacation_settings = get_settings(db)
        internal = [d for d in drivers if not is_external_employee(d.employee_id)]
        check_batch(day, Counter(d.team for d in internal), existing, vacation_settings,
                    exclude_driver_ids=[d.id for d in drivers])
        for team in sorted({d.team for d in drivers if is_external_employee(d.employee_id)}):
            check_quota(day, team, existing, vacation_settings, requester_is_external=True)

    requests = [_upsert(db, driver, day, status) for driver in drivers]
    commit_or_raise(db, "bulk set work status")
    teams = ", ".join(sorted({d.team for d in drivers}))
    logger.info(f"[VACATION] Bulk {status.value} on {day} for {len(drivers)} drivers ({teams})")
    return requests


# ── Read-side helpers ────────────────────────────────────────────────────────

def monthly_stats(driver_id: int, year: int, month: int, requests: Iterable,
                  vacation_settings: VacationSettingsSnapshot) -> MonthlyVacationStats:
    first, last = month_bounds(year, month)
    total = sum(
        1 for r in requests
        if r.driver_id == driver_id and first <= r.date <= last and r.is_day_off
    )
    minimum = vacation_settings.minimum_off_days_per_month
    return MonthlyVacationStats(
        driver_id=driver_id,
        year=year,
        month=month,
        total_off_days=total,
        required_minimum=minimum,
        remaining_required=max(0, minimum - total),
        maximum_allowed=vacation_settings.maximum_off_days_per_month,
    )


def daily_summary(day, requests: Iterable) -> dict[str, dict[str, int]]:
    """Day-off counts per team on one day, split internal / external."""
    day = to_day(day)
    summary: dict[str, dict[str, int]] = {}
    for r in requests:
        if r.date != day or not r.is_day_off:
            continue
        counts = summary.setdefault(r.team, {"internal": 0, "external": 0})
        counts["external" if r.is_external_driver else "internal"] += 1
    return summary


def requests_between(db: Session, start: date, end: date, driver_id: Optional[int] = None) -> list[VacationRecord]:
    query = db.query(VacationRequest).filter(VacationRequest.date >= start, VacationRequest.date <= end)
    if driver_id is not None:
        query = query.filter(VacationRequest.driver_id == driver_id)
    return [VacationRecord.from_model(r) for r in query.all()]
