from __future__ import annotations

from datetime import datetime, time
from typing import Callable, Optional

from ..common.datetime_utils import add_days, now_local
from ..core.enums import AnalysisMode
from ..core.exceptions import NotFoundError
from ..locations.repository import LocationDirectory
from ..shifts.repository import ShiftRepository
from ..timeclock.repository import TimeClockRepository
from .analyzer import CoverageAnalyzer
from .model import DateRange, WeekSummary


class CoverageReportService:
    """Loads a location's shifts (and optionally its clock entries) and summarizes them.

    Reads are unlocked; a slightly stale view is fine for dashboards.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        entries: TimeClockRepository,
        locations: LocationDirectory,
        *,
        analyzer: Optional[CoverageAnalyzer] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._shifts = shifts
        self._entries = entries
        self._locations = locations
        self._analyzer = analyzer or CoverageAnalyzer()
        self._clock = clock

    def analyze_location(
        self,
        location_id: str,
        date_range: DateRange,
        mode: AnalysisMode = AnalysisMode.EFFECTIVE,
        *,
        include_actuals: bool = False,
    ) -> WeekSummary:
        if not self._locations.location_exists(location_id):
            raise NotFoundError("location", location_id)

        shifts = self._shifts.list_for_location(location_id=location_id, start=date_range.start, end=date_range.end)
        entries = None
        if include_actuals:
            entries = self._entries.list_for_location(
                location_id,
                start=datetime.combine(date_range.start, time.min),
                # Sessions that start on the last day may clock out after midnight.
                end=datetime.combine(add_days(date_range.end, 1), time.max),
            )
        return self._analyzer.analyze(shifts, date_range, mode, entries, as_of=self._clock())
