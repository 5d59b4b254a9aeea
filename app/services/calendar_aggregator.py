# app/services/calendar_aggregator.py
"""
Calendar aggregator — per-day counts for a month view.

The grid covers full Sunday-first weeks, so leading and trailing days of the
adjacent months are included (in_month=False). Bookings are expanded once per
day by OperationContext; conflicts found there are carried on the view.
"""

from dataclasses import dataclass, field
from datetime import date

from app.exceptions import ValidationError
from app.models.enums import OperationStatus
from app.services.inspection_schedule import due_dates_between
from app.services.interval_store import BookingConflict
from app.services.snapshots import OperationContext
from app.services.vehicle_status_resolver import resolve
from app.utils.dates import month_grid


@dataclass(frozen=True)
class InactiveVehicle:
    vehicle_id: int
    plate_number: str
    status: OperationStatus
    reason: str


@dataclass(frozen=True)
class DaySummary:
    date: date
    in_month: bool
    total_vehicles: int
    inactive_count: int
    vacation_count: int
    inspection_due_count: int
    reservation_completed_count: int
    inactive_vehicles: tuple[InactiveVehicle, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MonthView:
    year: int
    month: int
    days: tuple[DaySummary, ...]
    conflicts: tuple[BookingConflict, ...]


_SHOP_STATUSES = (OperationStatus.INACTIVE_REPAIR, OperationStatus.INACTIVE_INSPECTION)


def month_view(year: int, month: int, context: OperationContext) -> MonthView:
    if not 1 <= month <= 12:
        raise ValidationError(f"Month {month} outside 1..12", field="month")

    grid = month_grid(year, month)
    dues_by_day: dict[date, int] = {}
    for vehicle in context.vehicles:
        for due in due_dates_between(vehicle, grid[0], grid[-1]):
            dues_by_day[due.date] = dues_by_day.get(due.date, 0) + 1

    days = []
    for day in grid:
        resolved = [(vehicle, resolve(vehicle, day, context)) for vehicle in context.vehicles]
        statuses = [s for _, s in resolved]
        inactive = tuple(
            InactiveVehicle(vehicle.id, vehicle.plate_number, s.status, s.reason)
            for vehicle, s in resolved if s.is_inactive
        )
        days.append(DaySummary(
            date=day,
            in_month=day.month == month,
            total_vehicles=len(statuses),
            inactive_count=sum(1 for s in statuses if s.status in _SHOP_STATUSES),
            vacation_count=sum(1 for s in statuses if s.status == OperationStatus.INACTIVE_VACATION),
            inspection_due_count=dues_by_day.get(day, 0),
            reservation_completed_count=len(context.bookings.vehicles_on(day)),
            inactive_vehicles=inactive,
        ))

    return MonthView(year, month, tuple(days), context.bookings.conflicts)
