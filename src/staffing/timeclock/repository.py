from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Protocol, Sequence

from .model import LocationSnapshot, NewClockEntry, TimeClockEntry

# Runs inside the append's atomic unit; raising aborts the append.
AppendGuard = Callable[[LocationSnapshot], None]


class TimeClockRepository(Protocol):
    def list_for_worker(
        self,
        worker_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[TimeClockEntry]:
        """Entries ordered by (clock_time, entry_id); bounds are inclusive."""

        raise NotImplementedError

    def list_for_location(
        self,
        location_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[TimeClockEntry]:
        raise NotImplementedError

    def location_snapshot(self, location_id: str) -> LocationSnapshot:
        raise NotImplementedError

    def append(
        self,
        new: NewClockEntry,
        *,
        expected_last_entry_id: Optional[int],
        guard: Optional[AppendGuard] = None,
    ) -> Optional[TimeClockEntry]:
        """Append one entry as an atomic unit.

        Returns None, writing nothing, when the worker's latest entry id is no longer
        ``expected_last_entry_id``. ``guard`` sees the location snapshot taken inside
        the same unit; any exception it raises propagates and nothing is written.
        """

        raise NotImplementedError
