# app/services/interval_store.py
"""
Temporal interval store.

Holds date-ranged records (inoperative periods, temporary assignments,
assignment changes) keyed by vehicle or driver and answers "which record
covers day D for key K". Also builds the per-day expansion of inspection
bookings, keyed by (vehicle_id, day).

Both structures are built once from a snapshot and are read-only afterwards.
"""

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Any, Callable, Generic, Hashable, Iterable, Mapping, Optional, TypeVar

from app.exceptions import ValidationError
from app.utils.dates import iter_days, to_day
from app.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DateRange:
    """Whole-day range, inclusive on both ends."""
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError(
                f"Start date {self.start.isoformat()} is after end date {self.end.isoformat()}",
                field="start_date",
            )

    @classmethod
    def of(cls, start, end=None) -> "DateRange":
        start_day = to_day(start)
        return cls(start_day, to_day(end) if end is not None else start_day)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, other: "DateRange") -> bool:
        return self.start <= other.end and other.start <= self.end

    def days(self) -> list[date]:
        return list(iter_days(self.start, self.end))

    def __len__(self) -> int:
        return (self.end - self.start).days + 1


class IntervalIndex(Generic[T]):
    """
    Immutable index of date-ranged records grouped by key.
    Records for one key are ordered by (start, id) so lookups are deterministic.
    """

    def __init__(self, records: Iterable[T], key: Callable[[T], Hashable],
                 span: Callable[[T], DateRange]):
        grouped: dict[Hashable, list[tuple[DateRange, T]]] = {}
        for record in records:
            grouped.setdefault(key(record), []).append((span(record), record))
        for entries in grouped.values():
            entries.sort(key=lambda item: (item[0].start, _record_id(item[1])))
        self._entries: Mapping[Hashable, tuple[tuple[DateRange, T], ...]] = MappingProxyType(
            {k: tuple(v) for k, v in grouped.items()}
        )

    def covering(self, key: Hashable, day: date) -> Optional[T]:
        """First record for key whose range contains day, or None."""
        for span, record in self._entries.get(key, ()):
            if span.start > day:
                break
            if span.contains(day):
                return record
        return None

    def all_covering(self, key: Hashable, day: date) -> list[T]:
        return [record for span, record in self._entries.get(key, ()) if span.contains(day)]

    def overlapping(self, key: Hashable, window: DateRange) -> list[T]:
        return [record for span, record in self._entries.get(key, ()) if span.overlaps(window)]

    def keys(self):
        return self._entries.keys()

    def __len__(self) -> int:
        return sum(len(v) for v in self._entries.values())


def _record_id(record: Any) -> int:
    return getattr(record, "id", 0) or 0


# ── Booking expansion ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BookingConflict:
    """Two bookings claiming the same vehicle on the same day."""
    vehicle_id: int
    date: date
    kept_booking_id: int
    rejected_booking_id: int


class BookingDayIndex:
    """Immutable map (vehicle_id, day) -> booking, plus conflicts found while building it."""

    def __init__(self, entries: Mapping[tuple[int, date], Any], conflicts: tuple[BookingConflict, ...]):
        self._entries = MappingProxyType(dict(entries))
        self.conflicts = conflicts

    def lookup(self, vehicle_id: int, day: date):
        return self._entries.get((vehicle_id, day))

    def vehicles_on(self, day: date) -> set[int]:
        return {vehicle_id for (vehicle_id, d) in self._entries if d == day}

    def keys(self):
        return self._entries.keys()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key) -> bool:
        return key in self._entries


def expand_bookings(bookings: Iterable[Any]) -> BookingDayIndex:
    """
    Expand every live booking into one entry per booked day.

    Bookings are processed in id order; when a later booking claims a
    (vehicle, day) already held by an earlier one, the earlier booking is
    kept and a BookingConflict is recorded. The same booking appearing twice
    in the input adds nothing the second time.
    """
    entries: dict[tuple[int, date], Any] = {}
    conflicts: list[BookingConflict] = []

    for booking in sorted(bookings, key=_record_id):
        if not booking.is_live:
            continue
        for day in booking.booked_days():
            key = (booking.vehicle_id, day)
            held = entries.get(key)
            if held is None:
                entries[key] = booking
            elif _record_id(held) != _record_id(booking):
                conflicts.append(BookingConflict(
                    vehicle_id=booking.vehicle_id,
                    date=day,
                    kept_booking_id=_record_id(held),
                    rejected_booking_id=_record_id(booking),
                ))

    for conflict in conflicts:
        logger.warning(
            f"[INSPECTION] Booking {conflict.rejected_booking_id} overlaps booking "
            f"{conflict.kept_booking_id} for vehicle {conflict.vehicle_id} on {conflict.date}"
        )
    return BookingDayIndex(entries, tuple(conflicts))
