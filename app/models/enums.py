# app/models/enums.py
"""String enums shared by models, resolvers and schemas. Stored as plain strings."""

import enum


class VehicleStatus(str, enum.Enum):
    NORMAL = "normal"
    INSPECTION = "inspection"
    REPAIR = "repair"


class DriverStatus(str, enum.Enum):
    WORKING = "working"
    VACATION = "vacation"
    SICK = "sick"
    AVAILABLE = "available"
    NIGHT_SHIFT = "night_shift"


class WorkStatus(str, enum.Enum):
    WORKING = "working"
    DAY_OFF = "day_off"
    NIGHT_SHIFT = "night_shift"


class InoperativeType(str, enum.Enum):
    REPAIR = "repair"
    MAINTENANCE = "maintenance"
    BREAKDOWN = "breakdown"
    OTHER = "other"


class PeriodStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class InspectionKind(str, enum.Enum):
    REGULAR = "regular"
    CRANE_ANNUAL = "crane_annual"


class BookingStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OperationStatus(str, enum.Enum):
    ACTIVE = "active"
    REASSIGNED = "reassigned"
    INACTIVE_VACATION = "inactive_vacation"
    INACTIVE_INSPECTION = "inactive_inspection"
    INACTIVE_REPAIR = "inactive_repair"


INACTIVE_STATUSES = frozenset({
    OperationStatus.INACTIVE_VACATION,
    OperationStatus.INACTIVE_INSPECTION,
    OperationStatus.INACTIVE_REPAIR,
})
