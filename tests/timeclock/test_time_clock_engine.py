from __future__ import annotations

import threading
from datetime import date, datetime, timedelta

import pytest

from staffing.core.enums import ClockType, ShiftStatus, WorkerStatus
from staffing.core.exceptions import (
    AuthorizationError,
    CoverageViolationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from staffing.shifts.model import ShiftDraft

DAY = datetime(2026, 3, 2)


def at(hh: int, mm: int = 0) -> datetime:
    return DAY.replace(hour=hh, minute=mm)


@pytest.fixture
def punch(engine, clock):
    """Record an event as it happens: the clock reads ``when`` at the time of the call."""

    def _punch(worker_id, action, when, **kwargs):
        clock.set(when)
        return engine.record(worker_id, action, clock_time=when, **kwargs)

    return _punch


def test_scenario_a_full_day(engine, punch):
    assert engine.current_status("w1") == WorkerStatus.CLOCKED_OUT

    punch("w1", ClockType.CLOCK_IN, at(9), location_id="L1")
    assert engine.current_status("w1") == WorkerStatus.CLOCKED_IN
    punch("w1", ClockType.BREAK_START, at(12))
    assert engine.current_status("w1") == WorkerStatus.ON_BREAK
    punch("w1", ClockType.BREAK_END, at(12, 15))
    assert engine.current_status("w1") == WorkerStatus.CLOCKED_IN
    punch("w1", ClockType.CLOCK_OUT, at(17))
    assert engine.current_status("w1") == WorkerStatus.CLOCKED_OUT

    assert engine.worked_minutes("w1", as_of=at(18)) == 8 * 60 - 15
    assert [e.location_id for e in engine.entries("w1")] == ["L1"] * 4
    assert not any(e.is_adjustment for e in engine.entries("w1"))


@pytest.mark.parametrize(
    "setup,action",
    [
        ([], ClockType.BREAK_START),
        ([], ClockType.BREAK_END),
        ([], ClockType.CLOCK_OUT),
        ([ClockType.CLOCK_IN], ClockType.CLOCK_IN),
        ([ClockType.CLOCK_IN], ClockType.BREAK_END),
        ([ClockType.CLOCK_IN, ClockType.BREAK_START], ClockType.CLOCK_IN),
        ([ClockType.CLOCK_IN, ClockType.BREAK_START], ClockType.BREAK_START),
    ],
)
def test_invalid_transitions_append_nothing(engine, punch, setup, action):
    for i, step in enumerate(setup):
        punch("w1", step, at(9, i), location_id="L1")
    before = list(engine.entries("w1"))
    status = engine.current_status("w1")

    with pytest.raises(InvalidTransitionError) as exc:
        punch("w1", action, at(10), location_id="L1")

    assert exc.value.from_state == status
    assert exc.value.attempted == action
    assert list(engine.entries("w1")) == before


def test_concurrent_identical_clock_ins_yield_one_success(engine, clock):
    clock.set(at(9))
    barrier = threading.Barrier(2)
    results = []

    def attempt():
        barrier.wait()
        try:
            engine.record("w1", ClockType.CLOCK_IN, location_id="L1", clock_time=at(9))
            results.append("ok")
        except InvalidTransitionError:
            results.append("rejected")

    threads = [threading.Thread(target=attempt) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == ["ok", "rejected"]
    assert len(engine.entries("w1")) == 1


def test_timestamps_must_move_forward(engine, punch):
    punch("w1", ClockType.CLOCK_IN, at(9), location_id="L1")
    for when in (at(9), at(8, 59)):
        with pytest.raises(ValidationError) as exc:
            engine.record("w1", ClockType.CLOCK_OUT, clock_time=when)
        assert exc.value.violations[0].code == "non_monotonic_time"
    assert engine.current_status("w1") == WorkerStatus.CLOCKED_IN


def test_future_clock_time_is_rejected(engine, clock):
    clock.set(at(9))
    with pytest.raises(ValidationError) as exc:
        engine.record("w1", ClockType.CLOCK_IN, location_id="L1", clock_time=datetime(2099, 1, 1, 9))
    assert exc.value.violations[0].code == "future_time"
    assert engine.entries("w1") == []

    # Small drift between the kiosk and the server is tolerated.
    engine.record("w1", ClockType.CLOCK_IN, location_id="L1", clock_time=at(9, 1))
    clock.set(at(17))
    engine.record("w1", ClockType.CLOCK_OUT)
    assert engine.current_status("w1") == WorkerStatus.CLOCKED_OUT


def test_backdated_entry_needs_a_manager(engine, clock):
    clock.set(at(10))
    with pytest.raises(ValidationError) as exc:
        engine.record("w1", ClockType.CLOCK_IN, location_id="L1", clock_time=at(9))
    assert exc.value.violations[0].code == "adjustment_requires_approval"

    with pytest.raises(AuthorizationError):
        engine.record("w1", ClockType.CLOCK_IN, location_id="L1", clock_time=at(9), adjusted_by="w2")

    with pytest.raises(ValidationError) as exc:
        engine.record("w1", ClockType.CLOCK_IN, location_id="L1", clock_time=at(9), adjusted_by="mgr")
    assert exc.value.violations[0].field == "adjustment_reason"
    assert engine.entries("w1") == []

    entry = engine.record(
        "w1",
        ClockType.CLOCK_IN,
        location_id="L1",
        clock_time=at(9),
        adjusted_by="mgr",
        adjustment_reason="  Forgot to clock in ",
    )
    assert entry.is_adjustment
    assert entry.adjusted_by == "mgr"
    assert entry.adjustment_reason == "Forgot to clock in"
    assert entry.created_at == at(10)


def test_adjustment_fields_ignored_for_on_time_entries(engine, punch):
    entry = punch("w1", ClockType.CLOCK_IN, at(9), location_id="L1", adjusted_by="mgr", adjustment_reason="n/a")
    assert not entry.is_adjustment
    assert entry.adjusted_by is None
    assert entry.adjustment_reason is None


@pytest.mark.parametrize("field", ["notes", "adjustment_reason"])
def test_non_text_fields_are_rejected(engine, punch, field):
    with pytest.raises(ValidationError) as exc:
        punch("w1", ClockType.CLOCK_IN, at(9), location_id="L1", **{field: 5})
    assert exc.value.violations[0].code == "malformed"
    assert engine.entries("w1") == []


def test_reference_errors(engine, punch):
    with pytest.raises(NotFoundError):
        punch("nobody", ClockType.CLOCK_IN, at(9), location_id="L1")
    with pytest.raises(ValidationError) as exc:
        punch("gone", ClockType.CLOCK_IN, at(9), location_id="L1")
    assert exc.value.violations[0].code == "worker_not_active"
    with pytest.raises(NotFoundError):
        punch("w1", ClockType.CLOCK_IN, at(9), location_id="L9")
    with pytest.raises(ValidationError) as exc:
        punch("w1", ClockType.CLOCK_IN, at(9))
    assert exc.value.violations[0].code == "required"
    with pytest.raises(ValidationError):
        punch("w1", "LUNCH", at(9), location_id="L1")


def test_mid_session_actions_stay_at_clock_in_location(punch):
    punch("w1", ClockType.CLOCK_IN, at(9), location_id="L1")
    with pytest.raises(ValidationError) as exc:
        punch("w1", ClockType.BREAK_START, at(10), location_id="L2")
    assert exc.value.violations[0].code == "location_mismatch"


def test_available_actions_follow_status(engine, punch):
    assert engine.available_actions("w1") == [ClockType.CLOCK_IN]
    punch("w1", ClockType.CLOCK_IN, at(9), location_id="L1")
    assert engine.available_actions("w1") == [ClockType.BREAK_START, ClockType.CLOCK_OUT]


def test_break_blocked_below_required_coverage(engine, punch):
    # L2 requires one worker to stay clocked in and allows one break at a time.
    punch("w1", ClockType.CLOCK_IN, at(9), location_id="L2")
    with pytest.raises(CoverageViolationError) as exc:
        punch("w1", ClockType.BREAK_START, at(10))

    assert exc.value.reason == "below_required_coverage"
    assert exc.value.location_id == "L2"
    assert engine.current_status("w1") == WorkerStatus.CLOCKED_IN


def test_break_blocked_by_max_concurrent_breaks(engine, punch):
    for w in ("w1", "w2", "w3"):
        punch(w, ClockType.CLOCK_IN, at(9), location_id="L2")
    punch("w1", ClockType.BREAK_START, at(10))

    with pytest.raises(CoverageViolationError) as exc:
        punch("w2", ClockType.BREAK_START, at(10, 5))
    assert exc.value.reason == "max_concurrent_breaks"

    punch("w1", ClockType.BREAK_END, at(10, 10))
    punch("w2", ClockType.BREAK_START, at(10, 15))
    assert engine.location_status("L2").on_break == frozenset({"w2"})


def test_concurrent_breaks_with_one_slot_left(engine, punch, clock):
    for w in ("w1", "w2", "w3"):
        punch(w, ClockType.CLOCK_IN, at(9), location_id="L2")
    clock.set(at(10))

    barrier = threading.Barrier(2)
    results = []

    def attempt(worker_id):
        barrier.wait()
        try:
            engine.record(worker_id, ClockType.BREAK_START, clock_time=at(10))
            results.append("ok")
        except CoverageViolationError:
            results.append("blocked")

    threads = [threading.Thread(target=attempt, args=(w,)) for w in ("w1", "w2")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == ["blocked", "ok"]
    assert len(engine.location_status("L2").on_break) == 1


def test_manager_override_is_recorded(engine, punch):
    punch("w1", ClockType.CLOCK_IN, at(9), location_id="L2")
    entry = punch("w1", ClockType.BREAK_START, at(10), override_by="mgr")

    assert entry.override_by == "mgr"
    assert engine.current_status("w1") == WorkerStatus.ON_BREAK


def test_override_without_permission_is_rejected(engine, punch):
    punch("w1", ClockType.CLOCK_IN, at(9), location_id="L2")
    with pytest.raises(AuthorizationError):
        punch("w1", ClockType.BREAK_START, at(10), override_by="w2")
    assert engine.current_status("w1") == WorkerStatus.CLOCKED_IN


def test_clock_events_drive_linked_shift(punch, scheduler):
    shift = scheduler.schedule(
        ShiftDraft(
            worker_id="w1",
            location_id="L1",
            shift_date=date(2026, 3, 2),
            scheduled_start="09:00",
            scheduled_end="17:00",
            position="Cashier",
        )
    ).shift

    punch("w1", ClockType.CLOCK_IN, at(9, 2), location_id="L1", shift_id=shift.shift_id)
    started = scheduler.get_shift(shift.shift_id)
    assert started.status == ShiftStatus.IN_PROGRESS
    assert started.actual_start == at(9, 2)

    punch("w1", ClockType.CLOCK_OUT, at(17, 1), shift_id=shift.shift_id)
    done = scheduler.get_shift(shift.shift_id)
    assert done.status == ShiftStatus.COMPLETED
    assert done.actual_end == at(17, 1)


def test_rejected_shift_link_appends_nothing(engine, punch, scheduler):
    shift = scheduler.schedule(
        ShiftDraft(
            worker_id="w2",
            location_id="L1",
            shift_date=date(2026, 3, 2),
            scheduled_start="09:00",
            scheduled_end="17:00",
            position="Cashier",
        )
    ).shift

    with pytest.raises(ValidationError) as exc:
        punch("w1", ClockType.CLOCK_IN, at(9), location_id="L1", shift_id=shift.shift_id)
    assert exc.value.violations[0].code == "shift_not_assigned"

    scheduler.transition(shift.shift_id, ShiftStatus.CANCELLED)
    with pytest.raises(InvalidTransitionError):
        punch("w2", ClockType.CLOCK_IN, at(9), location_id="L1", shift_id=shift.shift_id)

    assert engine.entries("w1") == []
    assert engine.entries("w2") == []


def test_sessions_filtered_by_time_window(engine, punch):
    punch("w1", ClockType.CLOCK_IN, at(9), location_id="L1")
    punch("w1", ClockType.CLOCK_OUT, at(12))
    punch("w1", ClockType.CLOCK_IN, at(9) + timedelta(days=1), location_id="L1")

    today = engine.sessions("w1", start=at(0), end=at(23, 59))
    assert len(today) == 1
    assert today[0].worked_minutes(at(23)) == 180
    assert len(engine.sessions("w1")) == 2


def test_list_entries_filters(engine, punch):
    punch("w1", ClockType.CLOCK_IN, at(9), location_id="L1")
    punch("w2", ClockType.CLOCK_IN, at(9, 5), location_id="L1")
    punch("w1", ClockType.CLOCK_OUT, at(12))
    punch("w1", ClockType.CLOCK_IN, at(9) + timedelta(days=1), location_id="L2")

    assert [e.clock_type for e in engine.list_entries(worker_id="w1", day=DAY.date())] == [
        ClockType.CLOCK_IN,
        ClockType.CLOCK_OUT,
    ]
    assert [e.worker_id for e in engine.list_entries(location_id="L1", clock_type="clock_in")] == ["w1", "w2"]
    assert [e.location_id for e in engine.list_entries(worker_id="w1", location_id="L2")] == ["L2"]

    with pytest.raises(ValidationError):
        engine.list_entries()
    with pytest.raises(ValidationError):
        engine.list_entries(worker_id="w1", clock_type="LUNCH")
    with pytest.raises(NotFoundError):
        engine.list_entries(worker_id="nobody")
    with pytest.raises(NotFoundError):
        engine.list_entries(location_id="L9")


def test_location_status_unknown_location(engine):
    with pytest.raises(NotFoundError):
        engine.location_status("L9")
