# app/services/inspection_schedule.py
"""
Inspection due dates and alerts.

Regular inspections recur every 3 months from the vehicle's next_inspection_date,
crane annual inspections every 12 months from crane_annual_inspection_date.
Occurrences are computed as anchor + k * cycle, so month-end clamping never drifts.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from app.config import settings
from app.models.enums import InspectionKind
from app.services.snapshots import VehicleSnapshot
from app.utils.dates import add_months, to_day

REGULAR_CYCLE_MONTHS = 3
CRANE_ANNUAL_CYCLE_MONTHS = 12

URGENCY_URGENT = "urgent"
URGENCY_WARNING = "warning"


@dataclass(frozen=True)
class InspectionDue:
    vehicle_id: int
    date: date
    kind: InspectionKind


@dataclass(frozen=True)
class InspectionAlert:
    vehicle_id: int
    plate_number: str
    kind: InspectionKind
    due_date: date
    days_until: int
    urgency: str


def _occurrences(anchor: date, cycle_months: int, start: date, end: date) -> list[date]:
    months_apart = (start.year - anchor.year) * 12 + (start.month - anchor.month)
    # Occurrences only roll forward from the anchor.
    k = max(months_apart // cycle_months - 1, 0)
    result = []
    while True:
        occurrence = add_months(anchor, k * cycle_months)
        if occurrence > end:
            return result
        if occurrence >= start:
            result.append(occurrence)
        k += 1


def _anchors(vehicle: VehicleSnapshot) -> list[tuple[date, int, InspectionKind]]:
    anchors = []
    if vehicle.next_inspection_date is not None:
        anchors.append((vehicle.next_inspection_date, REGULAR_CYCLE_MONTHS, InspectionKind.REGULAR))
    if vehicle.crane_annual_inspection_date is not None:
        anchors.append((vehicle.crane_annual_inspection_date, CRANE_ANNUAL_CYCLE_MONTHS,
                        InspectionKind.CRANE_ANNUAL))
    return anchors


def due_dates_between(vehicle: VehicleSnapshot, start: date, end: date) -> list[InspectionDue]:
    """Every regular and crane annual due date in [start, end], sorted by date."""
    dues = [
        InspectionDue(vehicle.id, occurrence, kind)
        for anchor, cycle, kind in _anchors(vehicle)
        for occurrence in _occurrences(anchor, cycle, start, end)
    ]
    return sorted(dues, key=lambda d: (d.date, d.kind.value))


def inspection_due_dates(vehicle: VehicleSnapshot, today, horizon_months: Optional[int] = None) -> list[InspectionDue]:
    """Due dates from today up to the horizon (INSPECTION_HORIZON_MONTHS by default)."""
    today = to_day(today)
    horizon = settings.INSPECTION_HORIZON_MONTHS if horizon_months is None else horizon_months
    return due_dates_between(vehicle, today, add_months(today, horizon))


def inspection_alerts(vehicles: Iterable[VehicleSnapshot], today) -> list[InspectionAlert]:
    """
    One alert per recorded inspection date that is overdue or due within
    INSPECTION_WARNING_DAYS. Most urgent first.
    """
    today = to_day(today)
    alerts = []
    for vehicle in vehicles:
        for due_date, _cycle, kind in _anchors(vehicle):
            days_until = (due_date - today).days
            if days_until <= settings.INSPECTION_URGENT_DAYS:
                urgency = URGENCY_URGENT
            elif days_until <= settings.INSPECTION_WARNING_DAYS:
                urgency = URGENCY_WARNING
            else:
                continue
            alerts.append(InspectionAlert(vehicle.id, vehicle.plate_number, kind, due_date,
                                          days_until, urgency))
    return sorted(alerts, key=lambda a: (a.days_until, a.vehicle_id))
