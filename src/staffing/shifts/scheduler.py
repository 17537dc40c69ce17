from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local, parse_clock_time
from ..common.locks import KeyedLocks
from ..common.validators import coerce_enum
from ..core.enums import SHIFT_TRANSITIONS, ShiftStatus, ShiftType
from ..core.exceptions import InvalidTransitionError, NotFoundError, OverlapError, ValidationError
from ..core.violations import Violation
from ..locations.repository import LocationDirectory
from ..workers.service import WorkerService
from .model import NewShift, Shift, ShiftDraft
from .rates.base import RatePolicy
from .rates.standard_policy import StandardRatePolicy
from .repository import ShiftRepository
from .validator import ShiftValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledShift:
    shift: Shift
    warnings: list[Violation] = field(default_factory=list)


class ShiftScheduler:
    """Use case: put a worker on a shift, and move shifts along their lifecycle."""

    def __init__(
        self,
        shifts: ShiftRepository,
        workers: WorkerService,
        locations: LocationDirectory,
        *,
        validator: Optional[ShiftValidator] = None,
        rate_policy: Optional[RatePolicy] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._shifts = shifts
        self._workers = workers
        self._locations = locations
        self._clock = clock
        self._validator = validator or ShiftValidator(clock=clock)
        self._rates = rate_policy or StandardRatePolicy()
        self._locks = KeyedLocks()

    def schedule(self, draft: ShiftDraft) -> ScheduledShift:
        result = self._validator.validate(draft)
        if not result.ok:
            logger.warning(
                "shift rejected worker=%s date=%s codes=%s",
                draft.worker_id,
                draft.shift_date,
                [v.code for v in result.errors],
            )
            raise ValidationError(result.violations)

        worker = self._workers.get_active(draft.worker_id)
        if not self._locations.location_exists(draft.location_id):
            raise NotFoundError("location", draft.location_id)

        rate, suggested = self._rates.resolve(draft, worker)
        new = NewShift(
            worker_id=draft.worker_id,
            location_id=draft.location_id,
            shift_date=draft.shift_date,
            scheduled_start=parse_clock_time(draft.scheduled_start),
            scheduled_end=parse_clock_time(draft.scheduled_end),
            shift_type=coerce_enum(ShiftType, draft.shift_type),
            position=draft.position.strip(),
            is_supervisor_shift=bool(draft.is_supervisor_shift),
            requires_supervisor_present=bool(draft.requires_supervisor_present),
            break_duration_minutes=int(draft.break_duration_minutes),
            hourly_rate=rate,
            rate_was_suggested=suggested,
            notes=draft.notes.strip() if draft.notes else None,
            created_at=self._clock(),
        )

        with self._locks.hold((new.worker_id, new.shift_date)):
            try:
                shift = self._shifts.create_if_no_overlap(new)
            except OverlapError as e:
                logger.warning(
                    "shift overlap worker=%s date=%s existing=%s",
                    new.worker_id,
                    new.shift_date,
                    e.existing_shift_id,
                )
                raise

        logger.info(
            "shift scheduled id=%s worker=%s location=%s date=%s %s-%s",
            shift.shift_id,
            shift.worker_id,
            shift.location_id,
            shift.shift_date,
            shift.scheduled_start,
            shift.scheduled_end,
        )
        return ScheduledShift(shift=shift, warnings=result.warnings)

    def get_shift(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(shift_id)
        if not shift:
            raise NotFoundError("shift", shift_id)
        return shift

    def ensure_can_transition(self, shift_id: int, new_status: ShiftStatus, *, worker_id: Optional[str] = None) -> Shift:
        shift = self.get_shift(shift_id)
        if worker_id is not None and shift.worker_id != worker_id:
            raise ValidationError.single(
                "shift_id",
                "shift_not_assigned",
                f"Shift {shift_id} is not assigned to worker {worker_id}",
            )
        if new_status not in SHIFT_TRANSITIONS[shift.status]:
            raise InvalidTransitionError(shift.status, new_status, subject="shift", subject_id=shift.shift_id)
        return shift

    def transition(self, shift_id: int, new_status: ShiftStatus | str, *, at: Optional[datetime] = None) -> Shift:
        target = coerce_enum(ShiftStatus, new_status)
        if target is None:
            raise ValidationError.single("status", "invalid_choice", f"Unknown shift status {new_status!r}")

        at = at or self._clock()
        try:
            shift = self.ensure_can_transition(shift_id, target)
            ok = self._shifts.update_status(
                shift_id=shift.shift_id,
                expected=shift.status,
                new_status=target,
                at=at,
                actual_start=at if target == ShiftStatus.IN_PROGRESS else None,
                actual_end=at if target == ShiftStatus.COMPLETED else None,
            )
            if not ok:
                # Lost a race: someone moved the shift first. Report against the state they left.
                latest = self.get_shift(shift_id)
                raise InvalidTransitionError(latest.status, target, subject="shift", subject_id=latest.shift_id)
        except InvalidTransitionError as e:
            logger.warning("shift transition rejected id=%s from=%s to=%s", shift_id, e.from_state, target.value)
            raise

        logger.info("shift transition id=%s %s->%s", shift_id, shift.status.value, target.value)
        return self.get_shift(shift_id)

    def list_shifts(
        self,
        *,
        start: date,
        end: date,
        location_id: Optional[str] = None,
        worker_id: Optional[str] = None,
        status: Optional[ShiftStatus] = None,
        shift_type: Optional[ShiftType] = None,
        supervisor_only: bool = False,
    ) -> Sequence[Shift]:
        if location_id:
            rows = self._shifts.list_for_location(location_id=location_id, start=start, end=end)
            if worker_id:
                rows = [s for s in rows if s.worker_id == worker_id]
        elif worker_id:
            rows = self._shifts.list_for_worker(worker_id=worker_id, start=start, end=end)
        else:
            raise ValidationError.single("location_id", "required", "location_id or worker_id is required")

        return [
            s
            for s in rows
            if (status is None or s.status == status)
            and (shift_type is None or s.shift_type == shift_type)
            and (not supervisor_only or s.is_supervisor_shift)
        ]
