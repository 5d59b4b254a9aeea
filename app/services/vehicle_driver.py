# app/services/vehicle_driver.py
"""
The only writer of Vehicle.driver.

assign_driver    — a driver takes the vehicle (structural or temporary)
unassign_driver  — the vehicle has no driver
restore_driver   — put back a captured original driver (may be empty)

Callers commit.
"""

from typing import Optional

from app.models.vehicle import Vehicle
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _set(vehicle: Vehicle, name: Optional[str], action: str):
    old = vehicle.driver
    vehicle.driver = name or None
    logger.info(f"[ASSIGN] {action} vehicle {vehicle.plate_number}: {old or '-'} → {vehicle.driver or '-'}")


def assign_driver(vehicle: Vehicle, name: str):
    _set(vehicle, name, "assign")


def unassign_driver(vehicle: Vehicle):
    _set(vehicle, None, "unassign")


def restore_driver(vehicle: Vehicle, original_name: Optional[str]):
    _set(vehicle, original_name, "restore")
