from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ShiftStatus
from ..core.exceptions import OverlapError
from .model import NewShift, Shift, find_overlap
from .repository import ShiftRepository


class InMemoryShiftRepository(ShiftRepository):
    """Process-local store. One lock makes check-then-insert atomic."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, Shift] = {}
        self._id = 0

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self._by_id.get(int(shift_id))

    def list_for_worker(self, *, worker_id: str, start: date, end: date) -> Sequence[Shift]:
        return self._select(lambda s: s.worker_id == worker_id, start, end)

    def list_for_location(self, *, location_id: str, start: date, end: date) -> Sequence[Shift]:
        return self._select(lambda s: s.location_id == location_id, start, end)

    def _select(self, pred, start: date, end: date) -> list[Shift]:
        with self._lock:
            items = [s for s in self._by_id.values() if pred(s) and start <= s.shift_date <= end]
        items.sort(key=lambda s: (s.shift_date, s.scheduled_start, s.shift_id))
        return items

    def create_if_no_overlap(self, new: NewShift) -> Shift:
        with self._lock:
            clash = find_overlap(self._by_id.values(), new)
            if clash:
                raise OverlapError(clash.shift_id)
            self._id += 1
            shift = Shift.from_new(self._id, new)
            self._by_id[shift.shift_id] = shift
            return shift

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
        with self._lock:
            current = self._by_id.get(int(shift_id))
            if not current or current.status != expected:
                return False
            self._by_id[current.shift_id] = replace(
                current,
                status=new_status,
                actual_start=actual_start or current.actual_start,
                actual_end=actual_end or current.actual_end,
                updated_at=at,
            )
            return True
