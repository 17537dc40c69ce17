from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import ranges_overlap
from ..core.enums import AnalysisMode, ShiftType
from ..shifts.model import Shift
from ..timeclock.model import TimeClockEntry, derive_sessions
from .model import DateRange, DaySummary, WeekSummary


def _hours(minutes: int) -> float:
    return round(minutes / 60, 2)


class CoverageAnalyzer:
    """Pure aggregation of shifts (and optionally clock entries) over a date range.

    ``mode`` only decides which shifts count in the totals. Coverage flags and the
    unsupervised check always ignore CANCELLED and NO_SHOW shifts.
    """

    def analyze(
        self,
        shifts: Iterable[Shift],
        date_range: DateRange,
        mode: AnalysisMode = AnalysisMode.EFFECTIVE,
        entries: Optional[Iterable[TimeClockEntry]] = None,
        *,
        as_of: Optional[datetime] = None,
    ) -> WeekSummary:
        by_day: dict[date, list[Shift]] = defaultdict(list)
        for s in shifts:
            if s.shift_date in date_range:
                by_day[s.shift_date].append(s)

        worked = self._worked_minutes_by_day(entries, date_range, as_of) if entries is not None else None

        days: list[DaySummary] = []
        week_workers: set[str] = set()
        supervisor_shifts = 0
        for day in date_range.days():
            day_shifts = by_day.get(day, [])
            counted = self._counted(day_shifts, mode)
            week_workers.update(s.worker_id for s in counted)
            supervisor_shifts += sum(1 for s in counted if s.is_supervisor_shift)

            summary = self._summarize_day(day, day_shifts, counted)
            if worked is not None:
                summary = replace(summary, actual_worked_hours=_hours(worked.get(day, 0)))
            days.append(summary)

        # A day with no effective shifts has nothing to warn about.
        staffed = [d for d in days if self._has_effective(by_day.get(d.day, []))]
        return WeekSummary(
            date_range=date_range,
            mode=mode,
            days=days,
            total_shifts=sum(d.shift_count for d in days),
            total_scheduled_hours=round(sum(d.total_scheduled_hours for d in days), 2),
            unique_workers=len(week_workers),
            supervisor_shift_count=supervisor_shifts,
            days_missing_opening=[d.day for d in staffed if not d.has_opening_shift],
            days_missing_closing=[d.day for d in staffed if not d.has_closing_shift],
            days_missing_supervisor=[d.day for d in staffed if not d.has_supervisor_coverage],
        )

    @staticmethod
    def _counted(shifts: Sequence[Shift], mode: AnalysisMode) -> list[Shift]:
        if mode == AnalysisMode.ALL:
            return list(shifts)
        return [s for s in shifts if s.contributes_to_coverage]

    @staticmethod
    def _has_effective(shifts: Sequence[Shift]) -> bool:
        return any(s.contributes_to_coverage for s in shifts)

    def _summarize_day(self, day: date, shifts: Sequence[Shift], counted: Sequence[Shift]) -> DaySummary:
        effective = [s for s in shifts if s.contributes_to_coverage]
        return DaySummary(
            day=day,
            shift_count=len(counted),
            unique_workers=len({s.worker_id for s in counted}),
            total_scheduled_hours=_hours(sum(s.duration_minutes for s in counted)),
            has_opening_shift=any(s.shift_type == ShiftType.OPENING for s in effective),
            has_closing_shift=any(s.shift_type == ShiftType.CLOSING for s in effective),
            has_supervisor_coverage=any(s.is_supervisor_shift for s in effective),
            unsupervised_shift_ids=self._unsupervised(effective),
        )

    @staticmethod
    def _unsupervised(effective: Sequence[Shift]) -> tuple[int, ...]:
        supervisors = [s for s in effective if s.is_supervisor_shift]
        missing = []
        for s in effective:
            if not s.requires_supervisor_present:
                continue
            covered = any(
                sup.shift_id != s.shift_id
                and sup.location_id == s.location_id
                and ranges_overlap(sup.minute_range, s.minute_range)
                for sup in supervisors
            )
            if not covered:
                missing.append(s.shift_id)
        return tuple(sorted(missing))

    @staticmethod
    def _worked_minutes_by_day(
        entries: Iterable[TimeClockEntry],
        date_range: DateRange,
        as_of: Optional[datetime],
    ) -> dict[date, int]:
        by_worker: dict[str, list[TimeClockEntry]] = defaultdict(list)
        for e in entries:
            by_worker[e.worker_id].append(e)

        totals: dict[date, int] = defaultdict(int)
        for log in by_worker.values():
            for session in derive_sessions(log):
                day = session.clock_in.date()
                # Open sessions only count when there is a reference time to measure to.
                if day not in date_range or (session.is_open and as_of is None):
                    continue
                totals[day] += session.worked_minutes(as_of or session.clock_out)
        return totals
