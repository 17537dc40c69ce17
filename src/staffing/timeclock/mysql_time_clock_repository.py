from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.validators import coerce_enum
from ..core.enums import ClockMethod, ClockType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LocationSnapshot, NewClockEntry, TimeClockEntry, status_after
from .repository import AppendGuard, TimeClockRepository

_COLUMNS = """
    entry_id, worker_id, location_id, clock_type, clock_time, clock_method,
    shift_id, notes, override_by, created_at,
    is_adjustment, adjustment_reason, adjusted_by
"""


class MySQLTimeClockRepository(TimeClockRepository):
    """Entries live in ``time_clock_entries``; ``clock_heads`` keeps one row per worker
    pointing at the latest entry, which doubles as the optimistic version and as the
    index behind location snapshots."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_entry(r: dict) -> TimeClockEntry:
        shift_id = r.get("shift_id")
        return TimeClockEntry(
            entry_id=int(r["entry_id"]),
            worker_id=str(r["worker_id"]),
            location_id=str(r["location_id"]),
            clock_type=ClockType(r["clock_type"]),
            clock_time=r["clock_time"],
            clock_method=coerce_enum(ClockMethod, r.get("clock_method")) or ClockMethod.MANUAL,
            shift_id=int(shift_id) if shift_id is not None else None,
            notes=r.get("notes"),
            override_by=r.get("override_by"),
            created_at=r.get("created_at"),
            is_adjustment=bool(r.get("is_adjustment")),
            adjustment_reason=r.get("adjustment_reason"),
            adjusted_by=r.get("adjusted_by"),
        )

    def list_for_worker(
        self,
        worker_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[TimeClockEntry]:
        return self._list("worker_id", worker_id, start, end)

    def list_for_location(
        self,
        location_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[TimeClockEntry]:
        return self._list("location_id", location_id, start, end)

    def _list(self, column: str, value: str, start: Optional[datetime], end: Optional[datetime]) -> list:
        sql = f"SELECT {_COLUMNS} FROM time_clock_entries WHERE {column}=%s"
        params: list = [value]
        if start is not None:
            sql += " AND clock_time >= %s"
            params.append(start)
        if end is not None:
            sql += " AND clock_time <= %s"
            params.append(end)
        sql += " ORDER BY clock_time ASC, entry_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [self._to_entry(r) for r in fetchall(cur)]

    def location_snapshot(self, location_id: str) -> LocationSnapshot:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._snapshot(cur, location_id, locking=False)

    @staticmethod
    def _snapshot(cur, location_id: str, *, locking: bool) -> LocationSnapshot:
        # Inside the append transaction the read must see the latest committed heads.
        suffix = " LOCK IN SHARE MODE" if locking else ""
        cur.execute(
            "SELECT worker_id, last_clock_type FROM clock_heads WHERE location_id=%s" + suffix,
            (location_id,),
        )
        statuses = {
            str(r["worker_id"]): status_after(ClockType(r["last_clock_type"]))
            for r in fetchall(cur)
            if r.get("last_clock_type")
        }
        return LocationSnapshot.from_statuses(location_id, statuses)

    def append(
        self,
        new: NewClockEntry,
        *,
        expected_last_entry_id: Optional[int],
        guard: Optional[AppendGuard] = None,
    ) -> Optional[TimeClockEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            if guard is not None:
                # Guarded appends always lock the location row before the worker head.
                cur.execute(
                    "SELECT location_id FROM locations WHERE location_id=%s FOR UPDATE",
                    (new.location_id,),
                )
                fetchone(cur)

            cur.execute("INSERT IGNORE INTO clock_heads(worker_id) VALUES(%s)", (new.worker_id,))
            cur.execute(
                "SELECT last_entry_id FROM clock_heads WHERE worker_id=%s FOR UPDATE",
                (new.worker_id,),
            )
            head = fetchone(cur)
            current = head.get("last_entry_id") if head else None
            if (int(current) if current is not None else None) != expected_last_entry_id:
                return None

            if guard is not None:
                guard(self._snapshot(cur, new.location_id, locking=True))

            cur.execute(
                """
                INSERT INTO time_clock_entries(
                    worker_id, location_id, clock_type, clock_time, clock_method,
                    shift_id, notes, override_by, created_at,
                    is_adjustment, adjustment_reason, adjusted_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    new.worker_id,
                    new.location_id,
                    new.clock_type.value,
                    new.clock_time,
                    new.clock_method.value,
                    new.shift_id,
                    new.notes,
                    new.override_by,
                    new.created_at,
                    int(new.is_adjustment),
                    new.adjustment_reason,
                    new.adjusted_by,
                ),
            )
            entry = TimeClockEntry.from_new(int(cur.lastrowid), new)

            cur.execute(
                """
                UPDATE clock_heads
                SET last_entry_id=%s, location_id=%s, last_clock_type=%s
                WHERE worker_id=%s
                """,
                (entry.entry_id, entry.location_id, entry.clock_type.value, entry.worker_id),
            )
            return entry
