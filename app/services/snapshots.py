# app/services/snapshots.py
"""
Immutable entity snapshots and the OperationContext the resolvers consume.

load_context() reads everything relevant to a date window from the store
once; after that the resolvers are pure functions of (context, day).
"""

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ValidationError
from app.models.assignment_change import VehicleAssignmentChange
from app.models.driver import Driver
from app.models.enums import BookingStatus, PeriodStatus, WorkStatus
from app.models.inoperative_period import VehicleInoperativePeriod
from app.models.inspection_booking import InspectionBooking
from app.models.temporary_assignment import TemporaryAssignment
from app.models.vacation_request import VacationRequest
from app.models.vehicle import Vehicle
from app.services.interval_store import BookingDayIndex, DateRange, IntervalIndex, expand_bookings
from app.utils.dates import optional_day, to_day


@dataclass(frozen=True)
class VehicleSnapshot:
    id: int
    plate_number: str
    model: str = ""
    team: str = ""
    garage: Optional[str] = None
    driver: Optional[str] = None
    status: str = "normal"
    last_inspection_date: Optional[date] = None
    next_inspection_date: Optional[date] = None
    crane_annual_inspection_date: Optional[date] = None

    @classmethod
    def from_model(cls, vehicle: Vehicle) -> "VehicleSnapshot":
        return cls(
            id=vehicle.id,
            plate_number=vehicle.plate_number,
            model=vehicle.model or "",
            team=vehicle.team or "",
            garage=vehicle.garage,
            driver=vehicle.driver or None,
            status=vehicle.status or "normal",
            last_inspection_date=optional_day(vehicle.last_inspection_date),
            next_inspection_date=optional_day(vehicle.next_inspection_date),
            crane_annual_inspection_date=optional_day(vehicle.crane_annual_inspection_date),
        )


@dataclass(frozen=True)
class DriverSnapshot:
    id: int
    name: str
    employee_id: str
    team: str
    assigned_vehicle_id: Optional[int] = None
    status: str = "working"
    is_night_shift: bool = False

    @property
    def is_external(self) -> bool:
        return is_external_employee(self.employee_id)

    @classmethod
    def from_model(cls, driver: Driver) -> "DriverSnapshot":
        return cls(
            id=driver.id,
            name=driver.name,
            employee_id=driver.employee_id,
            team=driver.team,
            assigned_vehicle_id=driver.assigned_vehicle_id,
            status=driver.status or "working",
            is_night_shift=bool(driver.is_night_shift),
        )


def is_external_employee(employee_id: Optional[str]) -> bool:
    return bool(employee_id) and employee_id.startswith(settings.EXTERNAL_EMPLOYEE_ID_PREFIX)


@dataclass(frozen=True)
class VacationRecord:
    driver_id: int
    date: date
    work_status: str
    team: str
    is_off: bool = False
    is_external_driver: bool = False
    id: int = 0

    @property
    def is_day_off(self) -> bool:
        return self.work_status == WorkStatus.DAY_OFF or self.is_off

    @classmethod
    def from_model(cls, request: VacationRequest) -> "VacationRecord":
        return cls(
            id=request.id or 0,
            driver_id=request.driver_id,
            date=to_day(request.date),
            work_status=request.work_status,
            team=request.team,
            is_off=bool(request.is_off),
            is_external_driver=bool(request.is_external_driver),
        )


@dataclass(frozen=True)
class InoperativeSnapshot:
    id: int
    vehicle_id: int
    start_date: date
    end_date: date
    period_type: str
    reason: Optional[str] = None
    status: str = PeriodStatus.ACTIVE.value
    original_driver_name: Optional[str] = None

    @property
    def span(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @classmethod
    def from_model(cls, period: VehicleInoperativePeriod) -> "InoperativeSnapshot":
        return cls(
            id=period.id,
            vehicle_id=period.vehicle_id,
            start_date=to_day(period.start_date),
            end_date=to_day(period.end_date),
            period_type=period.period_type,
            reason=period.reason,
            status=period.status,
            original_driver_name=period.original_driver_name,
        )


@dataclass(frozen=True)
class BookingSnapshot:
    id: int
    vehicle_id: int
    deadline_date: date
    scheduled_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    inspection_kind: str = "regular"
    status: str = BookingStatus.SCHEDULED.value
    memo: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    @property
    def span(self) -> DateRange:
        if self.start_date is not None and self.end_date is not None:
            return DateRange(self.start_date, self.end_date)
        if self.scheduled_date is not None:
            return DateRange(self.scheduled_date, self.scheduled_date)
        raise ValidationError(f"Inspection booking {self.id} has neither a date nor a date range",
                              field="scheduled_date")

    def booked_days(self) -> list[date]:
        return self.span.days()

    @classmethod
    def from_model(cls, booking: InspectionBooking) -> "BookingSnapshot":
        return cls(
            id=booking.id,
            vehicle_id=booking.vehicle_id,
            deadline_date=to_day(booking.deadline_date),
            scheduled_date=optional_day(booking.scheduled_date),
            start_date=optional_day(booking.start_date),
            end_date=optional_day(booking.end_date),
            inspection_kind=booking.inspection_kind,
            status=booking.status,
            memo=booking.memo,
        )


@dataclass(frozen=True)
class TemporaryAssignmentSnapshot:
    id: int
    driver_id: int
    driver_name: str
    vehicle_id: int
    start_date: date
    end_date: date
    original_driver_name: Optional[str] = None

    @property
    def span(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @classmethod
    def from_model(cls, assignment: TemporaryAssignment) -> "TemporaryAssignmentSnapshot":
        return cls(
            id=assignment.id,
            driver_id=assignment.driver_id,
            driver_name=assignment.driver_name,
            vehicle_id=assignment.vehicle_id,
            start_date=to_day(assignment.start_date),
            end_date=to_day(assignment.end_date),
            original_driver_name=assignment.original_driver_name,
        )


@dataclass(frozen=True)
class AssignmentChangeSnapshot:
    id: int
    vehicle_id: int
    date: date
    new_driver_id: int
    new_driver_name: str
    end_date: Optional[date] = None
    original_driver_id: Optional[int] = None
    original_driver_name: Optional[str] = None
    reason: Optional[str] = None
    is_temporary: bool = True

    @property
    def span(self) -> DateRange:
        return DateRange(self.date, self.end_date or self.date)

    @classmethod
    def from_model(cls, change: VehicleAssignmentChange) -> "AssignmentChangeSnapshot":
        return cls(
            id=change.id,
            vehicle_id=change.vehicle_id,
            date=to_day(change.date),
            end_date=optional_day(change.end_date),
            original_driver_id=change.original_driver_id,
            original_driver_name=change.original_driver_name,
            new_driver_id=change.new_driver_id,
            new_driver_name=change.new_driver_name,
            reason=change.reason,
            is_temporary=bool(change.is_temporary),
        )


# ── Vacation settings ────────────────────────────────────────────────────────

def _freeze_int_table(table, depth: int):
    """Nested {key: ... int} with integer-like keys normalised to int, read-only."""
    frozen = {}
    for key, value in (table or {}).items():
        if depth > 1:
            frozen[_int_key(key)] = _freeze_int_table(value, depth - 1)
        else:
            frozen[_int_key(key)] = int(value)
    return MappingProxyType(frozen)


def _int_key(key):
    if isinstance(key, str) and key.lstrip("-").isdigit():
        return int(key)
    return key


def _thaw(table):
    """Read-only nested mapping -> JSON-friendly dict with string keys."""
    if isinstance(table, Mapping):
        return {str(k): _thaw(v) for k, v in table.items()}
    return table


@dataclass(frozen=True)
class VacationSettingsSnapshot:
    """
    One immutable version of the quota settings.

    team_monthly_weekday_limits[team][month 1-12][weekday 0-6, Sunday = 0]
    specific_date_limits["YYYY-MM-DD"][team]
    max_drivers_off_per_day[team]
    """
    version: int = 0
    global_max_drivers_off_per_day: int = 3
    minimum_off_days_per_month: int = 9
    maximum_off_days_per_month: int = 12
    notification_day: int = 25
    max_drivers_off_per_day: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    team_monthly_weekday_limits: Mapping = field(default_factory=lambda: MappingProxyType({}))
    specific_date_limits: Mapping = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def create(cls, version: int = 0, global_max_drivers_off_per_day: int = 3,
               minimum_off_days_per_month: int = 9, maximum_off_days_per_month: int = 12,
               notification_day: int = 25, max_drivers_off_per_day=None,
               team_monthly_weekday_limits=None, specific_date_limits=None) -> "VacationSettingsSnapshot":
        return cls(
            version=version,
            global_max_drivers_off_per_day=int(global_max_drivers_off_per_day),
            minimum_off_days_per_month=int(minimum_off_days_per_month),
            maximum_off_days_per_month=int(maximum_off_days_per_month),
            notification_day=int(notification_day),
            max_drivers_off_per_day=_freeze_int_table(max_drivers_off_per_day, 1),
            team_monthly_weekday_limits=_freeze_int_table(team_monthly_weekday_limits, 3),
            specific_date_limits=MappingProxyType({
                str(day): _freeze_int_table(limits, 1)
                for day, limits in (specific_date_limits or {}).items()
            }),
        )

    @classmethod
    def defaults(cls) -> "VacationSettingsSnapshot":
        return cls.create(
            global_max_drivers_off_per_day=settings.DEFAULT_GLOBAL_MAX_OFF_PER_DAY,
            minimum_off_days_per_month=settings.DEFAULT_MINIMUM_OFF_DAYS_PER_MONTH,
            maximum_off_days_per_month=settings.DEFAULT_MAXIMUM_OFF_DAYS_PER_MONTH,
            notification_day=settings.DEFAULT_NOTIFICATION_DAY,
            max_drivers_off_per_day=dict(settings.DEFAULT_TEAM_LIMITS),
        )

    @classmethod
    def from_record(cls, record) -> "VacationSettingsSnapshot":
        return cls.create(
            version=record.version,
            global_max_drivers_off_per_day=record.global_max_drivers_off_per_day,
            minimum_off_days_per_month=record.minimum_off_days_per_month,
            maximum_off_days_per_month=record.maximum_off_days_per_month,
            notification_day=record.notification_day,
            max_drivers_off_per_day=record.max_drivers_off_per_day,
            team_monthly_weekday_limits=record.team_monthly_weekday_limits,
            specific_date_limits=record.specific_date_limits,
        )

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "global_max_drivers_off_per_day": self.global_max_drivers_off_per_day,
            "minimum_off_days_per_month": self.minimum_off_days_per_month,
            "maximum_off_days_per_month": self.maximum_off_days_per_month,
            "notification_day": self.notification_day,
            "max_drivers_off_per_day": _thaw(self.max_drivers_off_per_day),
            "team_monthly_weekday_limits": _thaw(self.team_monthly_weekday_limits),
            "specific_date_limits": _thaw(self.specific_date_limits),
        }


# ── Context ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OperationContext:
    """
    Everything the resolvers read, frozen at build time.
    Build with OperationContext.build(); the indexes are derived there.
    """
    vehicles: tuple[VehicleSnapshot, ...]
    drivers: tuple[DriverSnapshot, ...]
    vacations: Mapping[tuple[int, date], VacationRecord]
    inoperative: IntervalIndex
    bookings: BookingDayIndex
    temporary_by_vehicle: IntervalIndex
    temporary_by_driver: IntervalIndex
    changes_by_vehicle: IntervalIndex
    changes_by_driver: IntervalIndex
    structural_drivers: Mapping[int, DriverSnapshot] = field(default_factory=dict)
    base_driver_names: Mapping[int, Optional[str]] = field(default_factory=dict)

    @classmethod
    def build(cls, vehicles: Iterable[VehicleSnapshot] = (), drivers: Iterable[DriverSnapshot] = (),
              vacations: Iterable[VacationRecord] = (), inoperative: Iterable[InoperativeSnapshot] = (),
              bookings: Iterable[BookingSnapshot] = (),
              temporary_assignments: Iterable[TemporaryAssignmentSnapshot] = (),
              assignment_changes: Iterable[AssignmentChangeSnapshot] = (),
              live_assignments: Optional[Iterable[TemporaryAssignmentSnapshot]] = None) -> "OperationContext":
        """
        live_assignments are every temporary assignment not yet swept, whatever
        the window; they tell which Vehicle.driver values are temporary. Defaults
        to temporary_assignments.
        """
        vehicles = tuple(vehicles)
        drivers = tuple(drivers)
        temporary_assignments = tuple(temporary_assignments)
        assignment_changes = tuple(assignment_changes)
        live_assignments = temporary_assignments if live_assignments is None else tuple(live_assignments)
        base_names = _base_driver_names(vehicles, live_assignments)
        active_periods = [p for p in inoperative if p.status == PeriodStatus.ACTIVE]

        # Later records for the same (driver, day) supersede earlier ones.
        vacation_map: dict[tuple[int, date], VacationRecord] = {}
        for record in sorted(vacations, key=lambda r: r.id):
            vacation_map[(record.driver_id, record.date)] = record

        return cls(
            vehicles=vehicles,
            drivers=drivers,
            vacations=MappingProxyType(vacation_map),
            inoperative=IntervalIndex(active_periods, key=lambda p: p.vehicle_id, span=lambda p: p.span),
            bookings=expand_bookings(bookings),
            temporary_by_vehicle=IntervalIndex(temporary_assignments, key=lambda a: a.vehicle_id,
                                               span=lambda a: a.span),
            temporary_by_driver=IntervalIndex(temporary_assignments, key=lambda a: a.driver_id,
                                              span=lambda a: a.span),
            changes_by_vehicle=IntervalIndex(assignment_changes, key=lambda c: c.vehicle_id,
                                             span=lambda c: c.span),
            changes_by_driver=IntervalIndex(assignment_changes, key=lambda c: c.new_driver_id,
                                            span=lambda c: c.span),
            structural_drivers=MappingProxyType(_structural_drivers(vehicles, drivers, base_names)),
            base_driver_names=MappingProxyType(base_names),
        )

    # ── Lookups ──────────────────────────────────────────────────────────

    def structural_driver(self, vehicle: VehicleSnapshot) -> Optional[DriverSnapshot]:
        return self.structural_drivers.get(vehicle.id)

    def base_driver_name(self, vehicle: VehicleSnapshot) -> Optional[str]:
        """Vehicle.driver with any temporary driver swapped back for the one it replaced."""
        return self.base_driver_names.get(vehicle.id, vehicle.driver)

    def is_structurally_assigned(self, driver: DriverSnapshot) -> bool:
        if driver.assigned_vehicle_id is not None:
            return True
        return any(d.id == driver.id for d in self.structural_drivers.values())

    def work_status(self, driver_id: int, day: date) -> str:
        """A driver with no record for the day is working."""
        record = self.vacations.get((driver_id, day))
        if record is None:
            return WorkStatus.WORKING.value
        return WorkStatus.DAY_OFF.value if record.is_day_off else record.work_status

    def is_off(self, driver_id: int, day: date) -> bool:
        return self.work_status(driver_id, day) == WorkStatus.DAY_OFF

    def vehicle(self, vehicle_id: int) -> Optional[VehicleSnapshot]:
        return next((v for v in self.vehicles if v.id == vehicle_id), None)

    def driver(self, driver_id: int) -> Optional[DriverSnapshot]:
        return next((d for d in self.drivers if d.id == driver_id), None)


def _base_driver_names(vehicles, live_assignments) -> dict[int, Optional[str]]:
    """
    vehicle_id -> the driver name Vehicle.driver holds outside any temporary
    assignment. While an assignment is applied the field carries its driver, so
    the name it captured as original is used instead.
    """
    replaced: dict[tuple[int, str], Optional[str]] = {}
    for assignment in sorted(live_assignments, key=lambda a: a.id):
        replaced.setdefault((assignment.vehicle_id, assignment.driver_name), assignment.original_driver_name)

    result: dict[int, Optional[str]] = {}
    for vehicle in vehicles:
        name = vehicle.driver
        if name and (vehicle.id, name) in replaced:
            name = replaced[(vehicle.id, name)] or None
        result[vehicle.id] = name
    return result


def _structural_drivers(vehicles, drivers, base_names) -> dict[int, DriverSnapshot]:
    """
    vehicle_id -> structural driver. An explicit assigned_vehicle_id wins;
    otherwise the vehicle's base driver name is matched.
    """
    result: dict[int, DriverSnapshot] = {}
    for driver in sorted(drivers, key=lambda d: d.id):
        if driver.assigned_vehicle_id is not None and driver.assigned_vehicle_id not in result:
            result[driver.assigned_vehicle_id] = driver

    by_name = {}
    for driver in sorted(drivers, key=lambda d: d.id):
        by_name.setdefault(driver.name, driver)

    for vehicle in vehicles:
        name = base_names.get(vehicle.id)
        if vehicle.id in result or not name:
            continue
        match = by_name.get(name)
        if match is not None and match.assigned_vehicle_id is None:
            result[vehicle.id] = match
    return result


# ── Loading from the store ───────────────────────────────────────────────────

def load_context(db: Session, start: date, end: date) -> OperationContext:
    """Read every record relevant to [start, end] and freeze it into a context."""
    window = DateRange(to_day(start), to_day(end))

    vehicles = db.query(Vehicle).order_by(Vehicle.id).all()
    drivers = db.query(Driver).order_by(Driver.id).all()
    vacations = (
        db.query(VacationRequest)
        .filter(VacationRequest.date >= window.start, VacationRequest.date <= window.end)
        .all()
    )
    periods = (
        db.query(VehicleInoperativePeriod)
        .filter(
            VehicleInoperativePeriod.status == PeriodStatus.ACTIVE.value,
            VehicleInoperativePeriod.start_date <= window.end,
            VehicleInoperativePeriod.end_date >= window.start,
        )
        .all()
    )
    bookings = (
        db.query(InspectionBooking)
        .filter(
            InspectionBooking.status != BookingStatus.CANCELLED.value,
            or_(
                (InspectionBooking.scheduled_date >= window.start)
                & (InspectionBooking.scheduled_date <= window.end),
                (InspectionBooking.start_date <= window.end)
                & (InspectionBooking.end_date >= window.start),
            ),
        )
        .all()
    )
    temporary = (
        db.query(TemporaryAssignment)
        .filter(TemporaryAssignment.start_date <= window.end, TemporaryAssignment.end_date >= window.start)
        .all()
    )
    # The sweep deletes expired rows, so every row left is live.
    live = db.query(TemporaryAssignment).order_by(TemporaryAssignment.id).all()
    changes = (
        db.query(VehicleAssignmentChange)
        .filter(
            VehicleAssignmentChange.date <= window.end,
            or_(
                VehicleAssignmentChange.end_date >= window.start,
                (VehicleAssignmentChange.end_date.is_(None)) & (VehicleAssignmentChange.date >= window.start),
            ),
        )
        .all()
    )

    return OperationContext.build(
        vehicles=[VehicleSnapshot.from_model(v) for v in vehicles],
        drivers=[DriverSnapshot.from_model(d) for d in drivers],
        vacations=[VacationRecord.from_model(r) for r in vacations],
        inoperative=[InoperativeSnapshot.from_model(p) for p in periods],
        bookings=[BookingSnapshot.from_model(b) for b in bookings],
        temporary_assignments=[TemporaryAssignmentSnapshot.from_model(a) for a in temporary],
        assignment_changes=[AssignmentChangeSnapshot.from_model(c) for c in changes],
        live_assignments=[TemporaryAssignmentSnapshot.from_model(a) for a in live],
    )
