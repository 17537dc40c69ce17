from __future__ import annotations

from enum import Enum


class EmploymentStatus(str, Enum):
    """Employment state as kept by the personnel directory."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ON_LEAVE = "ON_LEAVE"
    TERMINATED = "TERMINATED"


class Permission(str, Enum):
    """Closed capability set; checks are set-membership tests."""

    SCHEDULE_SHIFTS = "SCHEDULE_SHIFTS"
    MANAGE_SHIFTS = "MANAGE_SHIFTS"
    USE_TIME_CLOCK = "USE_TIME_CLOCK"
    MANAGE_TIME_CLOCK = "MANAGE_TIME_CLOCK"
    OVERRIDE_COVERAGE = "OVERRIDE_COVERAGE"
    VIEW_REPORTS = "VIEW_REPORTS"


class ShiftType(str, Enum):
    REGULAR = "REGULAR"
    OPENING = "OPENING"
    CLOSING = "CLOSING"
    SPLIT = "SPLIT"
    DOUBLE = "DOUBLE"


class ShiftStatus(str, Enum):
    """Shift lifecycle. Only moves forward; see ``SHIFT_TRANSITIONS``."""

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return not SHIFT_TRANSITIONS.get(self)


SHIFT_TRANSITIONS: dict[ShiftStatus, frozenset[ShiftStatus]] = {
    ShiftStatus.SCHEDULED: frozenset({ShiftStatus.IN_PROGRESS, ShiftStatus.NO_SHOW, ShiftStatus.CANCELLED}),
    ShiftStatus.IN_PROGRESS: frozenset({ShiftStatus.COMPLETED, ShiftStatus.NO_SHOW, ShiftStatus.CANCELLED}),
    ShiftStatus.COMPLETED: frozenset(),
    ShiftStatus.NO_SHOW: frozenset(),
    ShiftStatus.CANCELLED: frozenset(),
}

# Shifts in these states never count towards coverage.
NON_CONTRIBUTING_STATUSES = frozenset({ShiftStatus.CANCELLED, ShiftStatus.NO_SHOW})


class ClockType(str, Enum):
    CLOCK_IN = "CLOCK_IN"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"
    CLOCK_OUT = "CLOCK_OUT"


class ClockMethod(str, Enum):
    """How the clock action was captured. Opaque to the state machine."""

    MANUAL = "MANUAL"
    MOBILE_APP = "MOBILE_APP"
    BIOMETRIC = "BIOMETRIC"
    BADGE_SCAN = "BADGE_SCAN"
    QR_CODE = "QR_CODE"


class WorkerStatus(str, Enum):
    """Derived real-time status; never persisted."""

    CLOCKED_OUT = "CLOCKED_OUT"
    CLOCKED_IN = "CLOCKED_IN"
    ON_BREAK = "ON_BREAK"


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"


class AnalysisMode(str, Enum):
    """Which shifts count towards totals in a coverage summary."""

    EFFECTIVE = "EFFECTIVE"
    ALL = "ALL"
