from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftStatus
from .model import NewShift, Shift


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def list_for_worker(self, *, worker_id: str, start: date, end: date) -> Sequence[Shift]:
        raise NotImplementedError

    def list_for_location(self, *, location_id: str, start: date, end: date) -> Sequence[Shift]:
        raise NotImplementedError

    def create_if_no_overlap(self, new: NewShift) -> Shift:
        """Check for an overlapping shift and insert, as one atomic unit.

        Raises OverlapError naming the existing shift.
        """

        raise NotImplementedError

    def update_status(
        self,
        *,
        shift_id: int,
        expected: ShiftStatus,
        new_status: ShiftStatus,
        at: datetime,
        actual_start: Optional[datetime] = None,
        actual_end: Optional[datetime] = None,
    ) -> bool:
        """Compare-and-set on status. False when the stored status is no longer ``expected``."""

        raise NotImplementedError
