from __future__ import annotations

from datetime import date, datetime

import pytest

from staffing.core.enums import AnalysisMode, ClockType, ShiftType
from staffing.core.exceptions import NotFoundError
from staffing.coverage.model import DateRange
from staffing.shifts.model import ShiftDraft

WEEK = DateRange.week_of(date(2026, 3, 2))


def _schedule(scheduler, worker_id, location_id, shift_type=ShiftType.REGULAR):
    return scheduler.schedule(
        ShiftDraft(
            worker_id=worker_id,
            location_id=location_id,
            shift_date=date(2026, 3, 3),
            scheduled_start="09:00",
            scheduled_end="13:00",
            position="Crew",
            shift_type=shift_type,
        )
    ).shift


def test_report_reads_only_the_requested_location(container):
    _schedule(container.shift_scheduler, "w1", "L1", ShiftType.OPENING)
    _schedule(container.shift_scheduler, "w2", "L2")

    summary = container.coverage_service.analyze_location("L1", WEEK)

    assert summary.total_shifts == 1
    assert summary.day(date(2026, 3, 3)).has_opening_shift
    assert summary.day(date(2026, 3, 3)).actual_worked_hours is None


def test_report_with_actuals(container, clock):
    engine = container.time_clock
    clock.set(datetime(2026, 3, 2, 9))
    engine.record("w1", ClockType.CLOCK_IN, location_id="L1")
    clock.set(datetime(2026, 3, 2, 11))
    engine.record("w1", ClockType.CLOCK_OUT)

    summary = container.coverage_service.analyze_location("L1", WEEK, AnalysisMode.ALL, include_actuals=True)
    assert summary.day(date(2026, 3, 2)).actual_worked_hours == 2


def test_report_for_unknown_location(container):
    with pytest.raises(NotFoundError):
        container.coverage_service.analyze_location("L9", WEEK)
