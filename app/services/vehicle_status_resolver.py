# app/services/vehicle_status_resolver.py
"""
Vehicle status resolver — merges every temporal source into one status per (vehicle, day).

Fixed precedence, first match wins:
  1. inoperative period covering the day     -> inactive_repair
  2. inspection booking on the day           -> inactive_inspection
  3. temporary assignment active on the day  -> active (temporary driver)
  4. assignment change for the day           -> reassigned
  5. structural driver has a day off         -> inactive_vacation
  6. otherwise                               -> active
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from app.models.enums import INACTIVE_STATUSES, OperationStatus
from app.services.snapshots import OperationContext, VehicleSnapshot
from app.utils.dates import to_day

UNASSIGNED = "unassigned"


@dataclass(frozen=True)
class VehicleOperationStatus:
    vehicle_id: int
    date: date
    status: OperationStatus
    reason: str
    assigned_driver_name: str
    original_driver_name: Optional[str] = None

    @property
    def is_inactive(self) -> bool:
        return self.status in INACTIVE_STATUSES


def resolve(vehicle: VehicleSnapshot, day, context: OperationContext) -> VehicleOperationStatus:
    day = to_day(day)
    structural = context.structural_driver(vehicle)
    default_name = structural.name if structural else (context.base_driver_name(vehicle) or UNASSIGNED)

    def status(kind: OperationStatus, reason: str, driver_name: str = default_name,
               original: Optional[str] = None) -> VehicleOperationStatus:
        return VehicleOperationStatus(vehicle.id, day, kind, reason, driver_name, original)

    period = context.inoperative.covering(vehicle.id, day)
    if period is not None:
        reason = period.period_type if not period.reason else f"{period.period_type}: {period.reason}"
        return status(OperationStatus.INACTIVE_REPAIR, reason)

    booking = context.bookings.lookup(vehicle.id, day)
    if booking is not None:
        return status(OperationStatus.INACTIVE_INSPECTION, "inspection reservation day")

    temporary = context.temporary_by_vehicle.covering(vehicle.id, day)
    if temporary is not None:
        return status(OperationStatus.ACTIVE, "temporary assignment", temporary.driver_name,
                      temporary.original_driver_name)

    change = context.changes_by_vehicle.covering(vehicle.id, day)
    if change is not None:
        return status(OperationStatus.REASSIGNED, change.reason or "assignment change",
                      change.new_driver_name, change.original_driver_name or default_name)

    if structural is not None and context.is_off(structural.id, day):
        return status(OperationStatus.INACTIVE_VACATION, f"{structural.name} is on a day off")

    return status(OperationStatus.ACTIVE, "in operation")


def resolve_all(day, context: OperationContext) -> list[VehicleOperationStatus]:
    return [resolve(vehicle, day, context) for vehicle in context.vehicles]
