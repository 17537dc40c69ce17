from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, Optional

from ..common.datetime_utils import add_days, iter_days, week_start
from ..core.constants import MAX_REPORT_DAYS
from ..core.enums import AnalysisMode
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days, at most ``MAX_REPORT_DAYS`` long."""

    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValidationError.single("end", "invalid_range", "end must not be before start")
        if (self.end - self.start).days >= MAX_REPORT_DAYS:
            raise ValidationError.single(
                "end",
                "range_too_long",
                f"Date range must not exceed {MAX_REPORT_DAYS} days",
            )

    @classmethod
    def week_of(cls, day: date) -> "DateRange":
        first = week_start(day)
        return cls(first, add_days(first, 6))

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[date]:
        return iter_days(self.start, self.end)

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class DaySummary:
    day: date
    shift_count: int = 0
    unique_workers: int = 0
    total_scheduled_hours: float = 0.0
    has_opening_shift: bool = False
    has_closing_shift: bool = False
    has_supervisor_coverage: bool = False
    unsupervised_shift_ids: tuple[int, ...] = ()
    actual_worked_hours: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "shift_count": self.shift_count,
            "unique_workers": self.unique_workers,
            "total_scheduled_hours": self.total_scheduled_hours,
            "has_opening_shift": self.has_opening_shift,
            "has_closing_shift": self.has_closing_shift,
            "has_supervisor_coverage": self.has_supervisor_coverage,
            "unsupervised_shift_ids": list(self.unsupervised_shift_ids),
            "actual_worked_hours": self.actual_worked_hours,
        }


@dataclass(frozen=True)
class WeekSummary:
    date_range: DateRange
    mode: AnalysisMode
    days: list[DaySummary] = field(default_factory=list)
    total_shifts: int = 0
    total_scheduled_hours: float = 0.0
    unique_workers: int = 0
    supervisor_shift_count: int = 0
    days_missing_opening: list[date] = field(default_factory=list)
    days_missing_closing: list[date] = field(default_factory=list)
    days_missing_supervisor: list[date] = field(default_factory=list)

    def day(self, day: date) -> DaySummary:
        for d in self.days:
            if d.day == day:
                return d
        raise KeyError(day)

    def to_dict(self) -> dict:
        return {
            "date_range": self.date_range.to_dict(),
            "mode": self.mode.value,
            "days": [d.to_dict() for d in self.days],
            "total_shifts": self.total_shifts,
            "total_scheduled_hours": self.total_scheduled_hours,
            "unique_workers": self.unique_workers,
            "supervisor_shift_count": self.supervisor_shift_count,
            "days_missing_opening": [d.isoformat() for d in self.days_missing_opening],
            "days_missing_closing": [d.isoformat() for d in self.days_missing_closing],
            "days_missing_supervisor": [d.isoformat() for d in self.days_missing_supervisor],
        }
