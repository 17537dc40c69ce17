"""Rule checks for a proposed shift.

Every rule runs on every call so the caller gets the full list of problems at once.
Long shifts are reported as WARNING violations: callers ask for confirmation instead
of rejecting them.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from ..common.datetime_utils import now_local, parse_clock_time, shift_duration_minutes
from ..common.validators import check_non_empty, check_range, check_text, coerce_enum
from ..core.constants import (
    LONG_SHIFT_WARNING_MINUTES,
    MAX_BREAK_MINUTES,
    MAX_SHIFT_MINUTES,
    MIN_BREAK_MINUTES,
    MIN_SHIFT_MINUTES,
)
from ..core.enums import Severity, ShiftType
from ..core.violations import ValidationResult, Violation
from .model import ShiftDraft


class ShiftValidator:
    def __init__(self, *, clock: Callable[[], datetime] = now_local):
        self._clock = clock

    def validate(self, draft: ShiftDraft) -> ValidationResult:
        result = ValidationResult()

        for name in ("worker_id", "location_id", "position", "shift_date"):
            result.add(check_non_empty(getattr(draft, name), name))

        if coerce_enum(ShiftType, draft.shift_type) is None:
            result.add(
                Violation(
                    field="shift_type",
                    code="invalid_choice",
                    message=f"Unknown shift type {draft.shift_type!r}",
                )
            )

        start = self._parse_time(draft.scheduled_start, "scheduled_start", result)
        end = self._parse_time(draft.scheduled_end, "scheduled_end", result)

        duration: Optional[int] = None
        if start is not None and end is not None:
            duration = shift_duration_minutes(start, end)
            self._check_duration(duration, result)

        self._check_not_in_past(draft, start, result)

        break_violation = check_range(
            draft.break_duration_minutes,
            "break_duration_minutes",
            MIN_BREAK_MINUTES,
            MAX_BREAK_MINUTES,
            code="break_out_of_range",
        )
        result.add(break_violation)
        if break_violation is None and duration and draft.break_duration_minutes >= duration:
            result.add(
                Violation(
                    field="break_duration_minutes",
                    code="break_exceeds_shift",
                    message="Break must be shorter than the shift",
                )
            )

        result.add(self._check_rate(draft.hourly_rate))
        result.add(check_text(draft.notes, "notes"))
        return result

    @staticmethod
    def _parse_time(value, field_name: str, result: ValidationResult):
        parsed = parse_clock_time(value)
        if parsed is None:
            result.add(
                Violation(
                    field=field_name,
                    code="malformed_time",
                    message=f"{field_name} must be a time in HH:MM format",
                )
            )
        return parsed

    @staticmethod
    def _check_duration(minutes: int, result: ValidationResult) -> None:
        hours = minutes / 60
        if minutes < MIN_SHIFT_MINUTES:
            result.add(
                Violation(
                    field="scheduled_end",
                    code="duration_too_short",
                    message=f"Shift duration must be at least 30 minutes (got {hours:.2f}h)",
                )
            )
        elif minutes > MAX_SHIFT_MINUTES:
            result.add(
                Violation(
                    field="scheduled_end",
                    code="duration_too_long",
                    message=f"Shift duration cannot exceed 12 hours (got {hours:.2f}h)",
                )
            )
        elif minutes > LONG_SHIFT_WARNING_MINUTES:
            result.add(
                Violation(
                    field="scheduled_end",
                    code="long_shift",
                    message=f"Shift is longer than 8 hours ({hours:.2f}h)",
                    severity=Severity.WARNING,
                )
            )

    def _check_not_in_past(self, draft: ShiftDraft, start, result: ValidationResult) -> None:
        if draft.shift_date is None:
            return
        now = self._clock()
        if start is not None:
            in_past = datetime.combine(draft.shift_date, start) < now
        else:
            in_past = draft.shift_date < now.date()
        if in_past:
            result.add(
                Violation(
                    field="shift_date",
                    code="in_the_past",
                    message="Cannot schedule shifts in the past",
                )
            )

    @staticmethod
    def _check_rate(rate) -> Optional[Violation]:
        if rate is None:
            return None
        try:
            negative = Decimal(str(rate)) < 0
        except InvalidOperation:
            negative = True
        if negative:
            return Violation(field="hourly_rate", code="negative_rate", message="hourly_rate must be a non-negative amount")
        return None
