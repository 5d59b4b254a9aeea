# app/services/availability_resolver.py
"""
Driver availability resolver.

unassigned_vehicles_for(day)  — vehicles that need a driver on that day
available_drivers_for(day)    — drivers who can take a new temporary assignment
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from app.services.interval_store import DateRange
from app.services.snapshots import DriverSnapshot, OperationContext, VehicleSnapshot
from app.utils.dates import to_day

REASON_NO_DRIVER = "no structural driver"
REASON_DRIVER_ON_VACATION = "driver on vacation"


@dataclass(frozen=True)
class UnassignedVehicle:
    vehicle: VehicleSnapshot
    reason: str


def unassigned_vehicles_for(day, context: OperationContext) -> list[UnassignedVehicle]:
    day = to_day(day)
    result = []
    for vehicle in context.vehicles:
        if context.temporary_by_vehicle.covering(vehicle.id, day) is not None:
            continue
        if context.changes_by_vehicle.covering(vehicle.id, day) is not None:
            continue
        structural = context.structural_driver(vehicle)
        if structural is None:
            result.append(UnassignedVehicle(vehicle, REASON_NO_DRIVER))
        elif context.is_off(structural.id, day):
            result.append(UnassignedVehicle(vehicle, REASON_DRIVER_ON_VACATION))
    return result


def available_drivers_for(day, context: OperationContext, end: Optional[date] = None) -> list[DriverSnapshot]:
    """
    Drivers eligible for a temporary assignment over [day, end] (end defaults
    to day): off on none of those days, not the new driver of an assignment
    change, no overlapping temporary assignment, not structurally assigned.
    """
    window = DateRange.of(day, end)
    days = window.days()
    result = []
    for driver in context.drivers:
        if context.is_structurally_assigned(driver):
            continue
        if any(context.is_off(driver.id, d) for d in days):
            continue
        if context.changes_by_driver.overlapping(driver.id, window):
            continue
        if context.temporary_by_driver.overlapping(driver.id, window):
            continue
        result.append(driver)
    return result
