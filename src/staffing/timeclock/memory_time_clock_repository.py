from __future__ import annotations

import threading
from datetime import datetime
from typing import Optional, Sequence

from .model import LocationSnapshot, NewClockEntry, TimeClockEntry, derive_status
from .repository import AppendGuard, TimeClockRepository


class InMemoryTimeClockRepository(TimeClockRepository):
    """Process-local append-only log. Version check, guard and append share one lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_worker: dict[str, list[TimeClockEntry]] = {}
        self._id = 0

    def list_for_worker(
        self,
        worker_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[TimeClockEntry]:
        with self._lock:
            log = list(self._by_worker.get(worker_id, ()))
        return [e for e in log if _within(e.clock_time, start, end)]

    def list_for_location(
        self,
        location_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[TimeClockEntry]:
        with self._lock:
            items = [
                e
                for log in self._by_worker.values()
                for e in log
                if e.location_id == location_id and _within(e.clock_time, start, end)
            ]
        items.sort(key=lambda e: e.sort_key)
        return items

    def location_snapshot(self, location_id: str) -> LocationSnapshot:
        with self._lock:
            return self._snapshot_locked(location_id)

    def _snapshot_locked(self, location_id: str) -> LocationSnapshot:
        statuses = {
            worker_id: derive_status(log)
            for worker_id, log in self._by_worker.items()
            if log and log[-1].location_id == location_id
        }
        return LocationSnapshot.from_statuses(location_id, statuses)

    def append(
        self,
        new: NewClockEntry,
        *,
        expected_last_entry_id: Optional[int],
        guard: Optional[AppendGuard] = None,
    ) -> Optional[TimeClockEntry]:
        with self._lock:
            log = self._by_worker.setdefault(new.worker_id, [])
            current = log[-1].entry_id if log else None
            if current != expected_last_entry_id:
                return None
            if guard is not None:
                guard(self._snapshot_locked(new.location_id))

            self._id += 1
            entry = TimeClockEntry.from_new(self._id, new)
            log.append(entry)
            log.sort(key=lambda e: e.sort_key)
            return entry


def _within(value: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    return (start is None or value >= start) and (end is None or value <= end)
