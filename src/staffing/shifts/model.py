from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, Optional

from ..common.datetime_utils import TimeLike, minute_range, ranges_overlap, shift_duration_minutes
from ..core.constants import DEFAULT_BREAK_MINUTES
from ..core.enums import NON_CONTRIBUTING_STATUSES, ShiftStatus, ShiftType


@dataclass(frozen=True)
class ShiftDraft:
    """Input for scheduling. Times may still be raw ``HH:MM`` strings."""

    worker_id: str
    location_id: str
    shift_date: Optional[date]
    scheduled_start: TimeLike
    scheduled_end: TimeLike
    position: str
    shift_type: ShiftType | str = ShiftType.REGULAR
    is_supervisor_shift: bool = False
    requires_supervisor_present: bool = False
    break_duration_minutes: int = DEFAULT_BREAK_MINUTES
    hourly_rate: Optional[Decimal] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class NewShift:
    """A validated draft with parsed times and a resolved rate, ready to store."""

    worker_id: str
    location_id: str
    shift_date: date
    scheduled_start: time
    scheduled_end: time
    shift_type: ShiftType
    position: str
    is_supervisor_shift: bool
    requires_supervisor_present: bool
    break_duration_minutes: int
    hourly_rate: Optional[Decimal]
    rate_was_suggested: bool
    notes: Optional[str]
    created_at: datetime

    @property
    def minute_range(self) -> tuple[int, int]:
        return minute_range(self.scheduled_start, self.scheduled_end)


@dataclass(frozen=True)
class Shift:
    """Domain entity: a planned work interval for one worker at one location."""

    shift_id: int
    worker_id: str
    location_id: str
    shift_date: date
    scheduled_start: time
    scheduled_end: time
    shift_type: ShiftType
    position: str
    status: ShiftStatus = ShiftStatus.SCHEDULED
    is_supervisor_shift: bool = False
    requires_supervisor_present: bool = False
    break_duration_minutes: int = 0
    hourly_rate: Optional[Decimal] = None
    rate_was_suggested: bool = False
    notes: Optional[str] = None
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_new(cls, shift_id: int, new: NewShift) -> "Shift":
        return cls(
            shift_id=shift_id,
            worker_id=new.worker_id,
            location_id=new.location_id,
            shift_date=new.shift_date,
            scheduled_start=new.scheduled_start,
            scheduled_end=new.scheduled_end,
            shift_type=new.shift_type,
            position=new.position,
            is_supervisor_shift=new.is_supervisor_shift,
            requires_supervisor_present=new.requires_supervisor_present,
            break_duration_minutes=new.break_duration_minutes,
            hourly_rate=new.hourly_rate,
            rate_was_suggested=new.rate_was_suggested,
            notes=new.notes,
            created_at=new.created_at,
            updated_at=new.created_at,
        )

    @property
    def duration_minutes(self) -> int:
        return shift_duration_minutes(self.scheduled_start, self.scheduled_end)

    @property
    def scheduled_hours(self) -> float:
        return self.duration_minutes / 60

    @property
    def minute_range(self) -> tuple[int, int]:
        return minute_range(self.scheduled_start, self.scheduled_end)

    @property
    def contributes_to_coverage(self) -> bool:
        return self.status not in NON_CONTRIBUTING_STATUSES

    def to_dict(self) -> dict:
        return {
            "shift_id": self.shift_id,
            "worker_id": self.worker_id,
            "location_id": self.location_id,
            "shift_date": self.shift_date.isoformat(),
            "scheduled_start": self.scheduled_start.strftime("%H:%M"),
            "scheduled_end": self.scheduled_end.strftime("%H:%M"),
            "scheduled_hours": round(self.scheduled_hours, 2),
            "shift_type": self.shift_type.value,
            "position": self.position,
            "status": self.status.value,
            "is_supervisor_shift": self.is_supervisor_shift,
            "requires_supervisor_present": self.requires_supervisor_present,
            "break_duration_minutes": self.break_duration_minutes,
            "hourly_rate": str(self.hourly_rate) if self.hourly_rate is not None else None,
            "rate_was_suggested": self.rate_was_suggested,
            "notes": self.notes,
            "actual_start": self.actual_start.isoformat() if self.actual_start else None,
            "actual_end": self.actual_end.isoformat() if self.actual_end else None,
        }


def find_overlap(existing: Iterable[Shift], new: NewShift) -> Optional[Shift]:
    """First non-cancelled shift of the same worker and date whose range intersects."""
    rng = new.minute_range
    for s in existing:
        if s.worker_id != new.worker_id or s.shift_date != new.shift_date:
            continue
        if s.status == ShiftStatus.CANCELLED:
            continue
        if ranges_overlap(s.minute_range, rng):
            return s
    return None
