"""Time clock entries and everything derived from them.

The entry log is the only source of truth. Worker status, work sessions and location
snapshots are all computed from it on demand; nothing here is cached or persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import minutes_between
from ..core.enums import ClockMethod, ClockType, WorkerStatus

TRANSITIONS: dict[tuple[WorkerStatus, ClockType], WorkerStatus] = {
    (WorkerStatus.CLOCKED_OUT, ClockType.CLOCK_IN): WorkerStatus.CLOCKED_IN,
    (WorkerStatus.CLOCKED_IN, ClockType.BREAK_START): WorkerStatus.ON_BREAK,
    (WorkerStatus.CLOCKED_IN, ClockType.CLOCK_OUT): WorkerStatus.CLOCKED_OUT,
    (WorkerStatus.ON_BREAK, ClockType.BREAK_END): WorkerStatus.CLOCKED_IN,
    (WorkerStatus.ON_BREAK, ClockType.CLOCK_OUT): WorkerStatus.CLOCKED_OUT,
}

# Every action lands in the same state whatever edge it takes.
_STATUS_AFTER: dict[ClockType, WorkerStatus] = {action: target for (_, action), target in TRANSITIONS.items()}


def next_status(current: WorkerStatus, action: ClockType) -> Optional[WorkerStatus]:
    return TRANSITIONS.get((current, action))


def status_after(action: ClockType) -> WorkerStatus:
    return _STATUS_AFTER[action]


def allowed_actions(current: WorkerStatus) -> list[ClockType]:
    return [action for (state, action) in TRANSITIONS if state == current]


@dataclass(frozen=True)
class NewClockEntry:
    worker_id: str
    location_id: str
    clock_type: ClockType
    clock_time: datetime
    clock_method: ClockMethod = ClockMethod.MANUAL
    shift_id: Optional[int] = None
    notes: Optional[str] = None
    override_by: Optional[str] = None
    created_at: Optional[datetime] = None
    is_adjustment: bool = False
    adjustment_reason: Optional[str] = None
    adjusted_by: Optional[str] = None


@dataclass(frozen=True)
class TimeClockEntry:
    """Immutable clock event. Never updated, never deleted."""

    entry_id: int
    worker_id: str
    location_id: str
    clock_type: ClockType
    clock_time: datetime
    clock_method: ClockMethod = ClockMethod.MANUAL
    shift_id: Optional[int] = None
    notes: Optional[str] = None
    override_by: Optional[str] = None
    created_at: Optional[datetime] = None
    is_adjustment: bool = False
    adjustment_reason: Optional[str] = None
    adjusted_by: Optional[str] = None

    @classmethod
    def from_new(cls, entry_id: int, new: NewClockEntry) -> "TimeClockEntry":
        return cls(
            entry_id=entry_id,
            worker_id=new.worker_id,
            location_id=new.location_id,
            clock_type=new.clock_type,
            clock_time=new.clock_time,
            clock_method=new.clock_method,
            shift_id=new.shift_id,
            notes=new.notes,
            override_by=new.override_by,
            created_at=new.created_at,
            is_adjustment=new.is_adjustment,
            adjustment_reason=new.adjustment_reason,
            adjusted_by=new.adjusted_by,
        )

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return self.clock_time, self.entry_id

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "worker_id": self.worker_id,
            "location_id": self.location_id,
            "clock_type": self.clock_type.value,
            "clock_time": self.clock_time.isoformat(),
            "clock_method": self.clock_method.value,
            "shift_id": self.shift_id,
            "notes": self.notes,
            "override_by": self.override_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "is_adjustment": self.is_adjustment,
            "adjustment_reason": self.adjustment_reason,
            "adjusted_by": self.adjusted_by,
        }


def ordered(entries: Iterable[TimeClockEntry]) -> list[TimeClockEntry]:
    return sorted(entries, key=lambda e: e.sort_key)


def derive_status(entries: Iterable[TimeClockEntry]) -> WorkerStatus:
    """Fold the transition table over the log in (clock_time, entry_id) order.

    An edge missing from the table (only possible in imported data) resolves to the
    state the action always lands in, so the most recent entry wins.
    """
    status = WorkerStatus.CLOCKED_OUT
    for e in ordered(entries):
        status = next_status(status, e.clock_type) or status_after(e.clock_type)
    return status


@dataclass
class BreakSpan:
    start: datetime
    end: Optional[datetime] = None


@dataclass
class WorkSession:
    """One CLOCK_IN .. CLOCK_OUT span scanned from the log."""

    worker_id: str
    location_id: str
    clock_in: datetime
    clock_out: Optional[datetime] = None
    breaks: list[BreakSpan] = field(default_factory=list)
    shift_id: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    def break_minutes(self, as_of: datetime) -> int:
        until = self.clock_out or as_of
        return sum(minutes_between(b.start, b.end or until) for b in self.breaks)

    def worked_minutes(self, as_of: datetime) -> int:
        total = minutes_between(self.clock_in, self.clock_out or as_of)
        return max(total - self.break_minutes(as_of), 0)

    def to_dict(self, as_of: datetime) -> dict:
        return {
            "worker_id": self.worker_id,
            "location_id": self.location_id,
            "shift_id": self.shift_id,
            "clock_in": self.clock_in.isoformat(),
            "clock_out": self.clock_out.isoformat() if self.clock_out else None,
            "breaks": [
                {"start": b.start.isoformat(), "end": b.end.isoformat() if b.end else None} for b in self.breaks
            ],
            "break_minutes": self.break_minutes(as_of),
            "worked_minutes": self.worked_minutes(as_of),
        }


def derive_sessions(entries: Iterable[TimeClockEntry]) -> list[WorkSession]:
    """Group a single worker's log into sessions. Stray entries outside a session are skipped."""
    sessions: list[WorkSession] = []
    current: Optional[WorkSession] = None

    for e in ordered(entries):
        if e.clock_type == ClockType.CLOCK_IN:
            current = WorkSession(
                worker_id=e.worker_id,
                location_id=e.location_id,
                clock_in=e.clock_time,
                shift_id=e.shift_id,
            )
            sessions.append(current)
            continue
        if current is None:
            continue

        open_break = current.breaks[-1] if current.breaks and current.breaks[-1].end is None else None
        if e.clock_type == ClockType.BREAK_START and open_break is None:
            current.breaks.append(BreakSpan(start=e.clock_time))
        elif e.clock_type == ClockType.BREAK_END and open_break is not None:
            open_break.end = e.clock_time
        elif e.clock_type == ClockType.CLOCK_OUT:
            if open_break is not None:
                open_break.end = e.clock_time
            current.clock_out = e.clock_time
            current = None

    return sessions


@dataclass(frozen=True)
class LocationSnapshot:
    """Who is on the clock at a location right now."""

    location_id: str
    clocked_in: frozenset[str] = frozenset()
    on_break: frozenset[str] = frozenset()

    @classmethod
    def from_statuses(cls, location_id: str, statuses: dict[str, WorkerStatus]) -> "LocationSnapshot":
        return cls(
            location_id=location_id,
            clocked_in=frozenset(w for w, s in statuses.items() if s == WorkerStatus.CLOCKED_IN),
            on_break=frozenset(w for w, s in statuses.items() if s == WorkerStatus.ON_BREAK),
        )

    def to_dict(self) -> dict:
        return {
            "location_id": self.location_id,
            "clocked_in": sorted(self.clocked_in),
            "on_break": sorted(self.on_break),
            "clocked_in_count": len(self.clocked_in),
            "on_break_count": len(self.on_break),
        }
