from __future__ import annotations

import random
from datetime import datetime, timedelta
from itertools import product

from staffing.core.enums import ClockType, WorkerStatus
from staffing.timeclock.model import (
    TRANSITIONS,
    TimeClockEntry,
    allowed_actions,
    derive_sessions,
    derive_status,
    next_status,
)

T0 = datetime(2026, 3, 2, 9, 0)


def _log(*steps):
    """steps: (minutes after T0, ClockType)."""
    return [
        TimeClockEntry(entry_id=i, worker_id="w1", location_id="L1", clock_type=ct, clock_time=T0 + timedelta(minutes=m))
        for i, (m, ct) in enumerate(steps, start=1)
    ]


def test_transition_table_has_exactly_five_edges():
    valid = {pair for pair in product(WorkerStatus, ClockType) if next_status(*pair) is not None}
    assert valid == set(TRANSITIONS)
    assert len(valid) == 5


def test_allowed_actions_per_state():
    assert allowed_actions(WorkerStatus.CLOCKED_OUT) == [ClockType.CLOCK_IN]
    assert allowed_actions(WorkerStatus.CLOCKED_IN) == [ClockType.BREAK_START, ClockType.CLOCK_OUT]
    assert allowed_actions(WorkerStatus.ON_BREAK) == [ClockType.BREAK_END, ClockType.CLOCK_OUT]


def test_empty_log_is_clocked_out():
    assert derive_status([]) == WorkerStatus.CLOCKED_OUT


def test_fold_is_order_independent_of_input_order():
    log = _log(
        (0, ClockType.CLOCK_IN),
        (180, ClockType.BREAK_START),
        (195, ClockType.BREAK_END),
        (300, ClockType.BREAK_START),
    )
    shuffled = list(log)
    random.Random(7).shuffle(shuffled)
    assert derive_status(log) == derive_status(shuffled) == WorkerStatus.ON_BREAK


def test_equal_timestamps_break_ties_by_entry_id():
    log = _log((0, ClockType.CLOCK_IN), (60, ClockType.CLOCK_OUT), (60, ClockType.CLOCK_IN))
    assert derive_status(list(reversed(log))) == WorkerStatus.CLOCKED_IN


def test_sessions_and_worked_minutes():
    log = _log(
        (0, ClockType.CLOCK_IN),
        (180, ClockType.BREAK_START),
        (195, ClockType.BREAK_END),
        (480, ClockType.CLOCK_OUT),
        (600, ClockType.CLOCK_IN),
        (630, ClockType.BREAK_START),
    )
    closed, open_ = derive_sessions(log)

    assert closed.clock_out == T0 + timedelta(minutes=480)
    assert closed.break_minutes(T0) == 15
    assert closed.worked_minutes(T0) == 465

    as_of = T0 + timedelta(minutes=660)
    assert open_.is_open
    assert open_.break_minutes(as_of) == 30
    assert open_.worked_minutes(as_of) == 30


def test_clock_out_closes_open_break():
    log = _log((0, ClockType.CLOCK_IN), (60, ClockType.BREAK_START), (90, ClockType.CLOCK_OUT))
    (session,) = derive_sessions(log)
    assert session.breaks[0].end == T0 + timedelta(minutes=90)
    assert session.worked_minutes(T0) == 60
