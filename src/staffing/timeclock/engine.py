from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.locks import KeyedLocks
from ..common.validators import check_text, coerce_enum
from ..core.constants import CLOCK_ADJUSTMENT_TOLERANCE_MINUTES, CLOCK_FUTURE_SKEW_MINUTES
from ..core.enums import ClockMethod, ClockType, Permission, ShiftStatus, WorkerStatus
from ..core.exceptions import CoverageViolationError, InvalidTransitionError, NotFoundError, ValidationError
from ..locations.model import ClockPolicy
from ..locations.repository import LocationDirectory
from ..shifts.scheduler import ShiftScheduler
from ..workers.service import WorkerService
from .coverage_guard import CoverageGuard
from .model import (
    LocationSnapshot,
    NewClockEntry,
    TimeClockEntry,
    WorkSession,
    allowed_actions,
    derive_sessions,
    derive_status,
    next_status,
)
from .repository import TimeClockRepository

logger = logging.getLogger(__name__)

# Shift lifecycle moves driven by clock events.
_SHIFT_TARGETS = {
    ClockType.CLOCK_IN: ShiftStatus.IN_PROGRESS,
    ClockType.CLOCK_OUT: ShiftStatus.COMPLETED,
}


class TimeClockEngine:
    """Event-sourced time clock.

    Every write goes through ``record``; every read is a fold over the stored log.
    Writes for one worker are serialized by a worker lock, then a location lock, and
    the repository re-checks the worker's latest entry id when appending, so a writer
    that lost a race sees the winner's state and is rejected.
    """

    def __init__(
        self,
        entries: TimeClockRepository,
        workers: WorkerService,
        locations: LocationDirectory,
        *,
        scheduler: Optional[ShiftScheduler] = None,
        default_policy: Optional[ClockPolicy] = None,
        clock: Callable[[], datetime] = now_local,
        max_attempts: int = 3,
        future_skew: timedelta = timedelta(minutes=CLOCK_FUTURE_SKEW_MINUTES),
        adjustment_tolerance: timedelta = timedelta(minutes=CLOCK_ADJUSTMENT_TOLERANCE_MINUTES),
    ):
        self._entries = entries
        self._workers = workers
        self._locations = locations
        self._scheduler = scheduler
        self._default_policy = default_policy or ClockPolicy()
        self._clock = clock
        self._max_attempts = max(1, max_attempts)
        self._future_skew = future_skew
        self._adjustment_tolerance = adjustment_tolerance
        self._locks = KeyedLocks()

    def record(
        self,
        worker_id: str,
        clock_type: ClockType | str,
        *,
        location_id: Optional[str] = None,
        clock_time: Optional[datetime] = None,
        clock_method: ClockMethod | str = ClockMethod.MANUAL,
        shift_id: Optional[int] = None,
        notes: Optional[str] = None,
        override_by: Optional[str] = None,
        adjusted_by: Optional[str] = None,
        adjustment_reason: Optional[str] = None,
    ) -> TimeClockEntry:
        """Append one clock event for ``worker_id``.

        ``clock_time`` defaults to now. A time more than the adjustment tolerance in
        the past is recorded as an adjustment and needs ``adjusted_by`` (a worker with
        MANAGE_TIME_CLOCK) and an ``adjustment_reason``. ``override_by`` names the
        worker holding OVERRIDE_COVERAGE who lets a break skip the coverage guard.
        """
        action = coerce_enum(ClockType, clock_type)
        if action is None:
            raise ValidationError.single("clock_type", "invalid_choice", f"Unknown clock type {clock_type!r}")
        method = coerce_enum(ClockMethod, clock_method)
        if method is None:
            raise ValidationError.single("clock_method", "invalid_choice", f"Unknown clock method {clock_method!r}")
        for name, value in (("notes", notes), ("adjustment_reason", adjustment_reason)):
            violation = check_text(value, name)
            if violation is not None:
                raise ValidationError([violation])

        self._workers.get_active(worker_id)
        if override_by:
            self._workers.require_permission(override_by, Permission.OVERRIDE_COVERAGE)
        now = self._clock()
        at = clock_time or now
        is_adjustment = self._check_clock_time(worker_id, at, now, adjusted_by, adjustment_reason)

        with self._locks.hold(("worker", worker_id)):
            history = self._entries.list_for_worker(worker_id)
            status = derive_status(history)
            self._ensure_transition(worker_id, status, action)

            location_id = self._resolve_location(action, history, location_id)
            if not self._locations.location_exists(location_id):
                raise NotFoundError("location", location_id)
            if shift_id is not None:
                self._check_shift(worker_id, int(shift_id), action)

            with self._locks.hold(("location", location_id)):
                entry = self._append(
                    NewClockEntry(
                        worker_id=worker_id,
                        location_id=location_id,
                        clock_type=action,
                        clock_time=at,
                        clock_method=method,
                        shift_id=int(shift_id) if shift_id is not None else None,
                        notes=notes.strip() if notes else None,
                        override_by=override_by or None,
                        created_at=now,
                        is_adjustment=is_adjustment,
                        adjustment_reason=adjustment_reason.strip() if is_adjustment else None,
                        adjusted_by=adjusted_by if is_adjustment else None,
                    ),
                    history,
                )

        if entry.shift_id is not None and action in _SHIFT_TARGETS:
            self._advance_shift(entry, _SHIFT_TARGETS[action])

        logger.info(
            "clock entry id=%s worker=%s location=%s type=%s at=%s override_by=%s adjusted_by=%s",
            entry.entry_id,
            entry.worker_id,
            entry.location_id,
            entry.clock_type.value,
            entry.clock_time.isoformat(),
            entry.override_by,
            entry.adjusted_by,
        )
        return entry

    def _check_clock_time(
        self,
        worker_id: str,
        at: datetime,
        now: datetime,
        adjusted_by: Optional[str],
        reason: Optional[str],
    ) -> bool:
        """Reject future times; returns True when ``at`` counts as an adjustment."""
        if at > now + self._future_skew:
            logger.warning("clock time in the future worker=%s at=%s now=%s", worker_id, at.isoformat(), now.isoformat())
            raise ValidationError.single(
                "clock_time",
                "future_time",
                f"Clock time {at.isoformat()} is in the future",
            )
        if now - at <= self._adjustment_tolerance:
            return False

        if not adjusted_by:
            raise ValidationError.single(
                "clock_time",
                "adjustment_requires_approval",
                f"Clock time {at.isoformat()} is in the past and needs adjusted_by",
            )
        self._workers.require_permission(adjusted_by, Permission.MANAGE_TIME_CLOCK)
        if not reason or not reason.strip():
            raise ValidationError.single(
                "adjustment_reason",
                "required",
                "adjustment_reason is required for adjusted entries",
            )
        return True

    def _append(self, new: NewClockEntry, history: Sequence[TimeClockEntry]) -> TimeClockEntry:
        guard = None
        if new.clock_type == ClockType.BREAK_START and not new.override_by:
            guard = CoverageGuard(self._policy_for(new.location_id))

        for _ in range(self._max_attempts):
            status = derive_status(history)
            self._ensure_transition(new.worker_id, status, new.clock_type)
            last = history[-1] if history else None
            if last is not None and new.clock_time <= last.clock_time:
                raise ValidationError.single(
                    "clock_time",
                    "non_monotonic_time",
                    f"Clock time {new.clock_time.isoformat()} is not after the last entry "
                    f"at {last.clock_time.isoformat()}",
                )

            try:
                entry = self._entries.append(
                    new,
                    expected_last_entry_id=last.entry_id if last else None,
                    guard=guard,
                )
            except CoverageViolationError as e:
                logger.warning(
                    "break rejected worker=%s location=%s reason=%s counts=%s",
                    new.worker_id,
                    e.location_id,
                    e.reason,
                    e.counts,
                )
                raise
            if entry is not None:
                return entry

            # Another writer appended first; re-read and decide against their state.
            history = self._entries.list_for_worker(new.worker_id)

        status = derive_status(history)
        logger.warning("clock entry lost repeated races worker=%s type=%s", new.worker_id, new.clock_type.value)
        raise InvalidTransitionError(status, new.clock_type, subject="worker", subject_id=new.worker_id)

    def _ensure_transition(self, worker_id: str, status: WorkerStatus, action: ClockType) -> None:
        if next_status(status, action) is None:
            logger.warning("clock transition rejected worker=%s from=%s type=%s", worker_id, status.value, action.value)
            raise InvalidTransitionError(status, action, subject="worker", subject_id=worker_id)

    @staticmethod
    def _resolve_location(
        action: ClockType,
        history: Sequence[TimeClockEntry],
        location_id: Optional[str],
    ) -> str:
        if action == ClockType.CLOCK_IN:
            if not location_id:
                raise ValidationError.single("location_id", "required", "location_id is required to clock in")
            return location_id

        # Mid-session events stay at the location the worker clocked in at.
        session_location = history[-1].location_id
        if location_id and location_id != session_location:
            raise ValidationError.single(
                "location_id",
                "location_mismatch",
                f"Worker is clocked in at {session_location}, not {location_id}",
            )
        return session_location

    def _check_shift(self, worker_id: str, shift_id: int, action: ClockType) -> None:
        if self._scheduler is None:
            raise ValidationError.single("shift_id", "unsupported", "Shift linking is not configured")
        target = _SHIFT_TARGETS.get(action)
        if target is not None:
            self._scheduler.ensure_can_transition(shift_id, target, worker_id=worker_id)
            return
        shift = self._scheduler.get_shift(shift_id)
        if shift.worker_id != worker_id:
            raise ValidationError.single(
                "shift_id",
                "shift_not_assigned",
                f"Shift {shift_id} is not assigned to worker {worker_id}",
            )

    def _advance_shift(self, entry: TimeClockEntry, target: ShiftStatus) -> None:
        try:
            self._scheduler.transition(entry.shift_id, target, at=entry.clock_time)
        except InvalidTransitionError as e:
            # The entry is already stored; a concurrent shift update won. Keep the entry.
            logger.warning(
                "shift not advanced after clock entry id=%s shift=%s from=%s to=%s",
                entry.entry_id,
                entry.shift_id,
                e.from_state,
                target.value,
            )

    def _policy_for(self, location_id: str) -> ClockPolicy:
        return self._locations.get_clock_policy(location_id) or self._default_policy

    def current_status(self, worker_id: str) -> WorkerStatus:
        return derive_status(self._entries.list_for_worker(worker_id))

    def available_actions(self, worker_id: str) -> list[ClockType]:
        return allowed_actions(self.current_status(worker_id))

    def entries(
        self,
        worker_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[TimeClockEntry]:
        return self._entries.list_for_worker(worker_id, start=start, end=end)

    def list_entries(
        self,
        *,
        worker_id: Optional[str] = None,
        location_id: Optional[str] = None,
        day: Optional[date] = None,
        clock_type: ClockType | str | None = None,
    ) -> list[TimeClockEntry]:
        """Entry log filtered by worker and/or location, calendar day and action."""
        action = None
        if clock_type:
            action = coerce_enum(ClockType, clock_type)
            if action is None:
                raise ValidationError.single("clock_type", "invalid_choice", f"Unknown clock type {clock_type!r}")
        start = datetime.combine(day, time.min) if day else None
        end = datetime.combine(day, time.max) if day else None

        if worker_id:
            self._workers.get(worker_id)
            rows = self._entries.list_for_worker(worker_id, start=start, end=end)
            if location_id:
                rows = [e for e in rows if e.location_id == location_id]
        elif location_id:
            if not self._locations.location_exists(location_id):
                raise NotFoundError("location", location_id)
            rows = self._entries.list_for_location(location_id, start=start, end=end)
        else:
            raise ValidationError.single("worker_id", "required", "worker_id or location_id is required")

        return [e for e in rows if action is None or e.clock_type == action]

    def sessions(
        self,
        worker_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[WorkSession]:
        return derive_sessions(self.entries(worker_id, start=start, end=end))

    def worked_minutes(
        self,
        worker_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        as_of: Optional[datetime] = None,
    ) -> int:
        as_of = as_of or self._clock()
        return sum(s.worked_minutes(as_of) for s in self.sessions(worker_id, start=start, end=end))

    def location_status(self, location_id: str) -> LocationSnapshot:
        if not self._locations.location_exists(location_id):
            raise NotFoundError("location", location_id)
        return self._entries.location_snapshot(location_id)
