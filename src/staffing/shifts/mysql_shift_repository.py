from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import ShiftStatus, ShiftType
from ..core.exceptions import OverlapError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import NewShift, Shift, find_overlap
from .repository import ShiftRepository

_COLUMNS = """
    shift_id, worker_id, location_id, shift_date, scheduled_start, scheduled_end,
    shift_type, position, status, is_supervisor_shift, requires_supervisor_present,
    break_duration_minutes, hourly_rate, rate_was_suggested, notes,
    actual_start, actual_end, created_at, updated_at
"""


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_shift(r: dict) -> Shift:
        rate = r.get("hourly_rate")
        return Shift(
            shift_id=int(r["shift_id"]),
            worker_id=str(r["worker_id"]),
            location_id=str(r["location_id"]),
            shift_date=r["shift_date"],
            scheduled_start=normalize_mysql_time(r["scheduled_start"]),
            scheduled_end=normalize_mysql_time(r["scheduled_end"]),
            shift_type=ShiftType(r["shift_type"]),
            position=r["position"],
            status=ShiftStatus(r["status"]),
            is_supervisor_shift=bool(r.get("is_supervisor_shift")),
            requires_supervisor_present=bool(r.get("requires_supervisor_present")),
            break_duration_minutes=int(r.get("break_duration_minutes") or 0),
            hourly_rate=Decimal(str(rate)) if rate is not None else None,
            rate_was_suggested=bool(r.get("rate_was_suggested")),
            notes=r.get("notes"),
            actual_start=r.get("actual_start"),
            actual_end=r.get("actual_end"),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
        )

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return self._to_shift(r) if r else None

    def list_for_worker(self, *, worker_id: str, start: date, end: date) -> Sequence[Shift]:
        return self._list("worker_id", worker_id, start, end)

    def list_for_location(self, *, location_id: str, start: date, end: date) -> Sequence[Shift]:
        return self._list("location_id", location_id, start, end)

    def _list(self, column: str, value: str, start: date, end: date) -> list[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE {column}=%s AND shift_date BETWEEN %s AND %s
                ORDER BY shift_date ASC, scheduled_start ASC, shift_id ASC
                """,
                (value, start, end),
            )
            return [self._to_shift(r) for r in fetchall(cur)]

    def create_if_no_overlap(self, new: NewShift) -> Shift:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # Locks the worker's rows for the day (and the index gap when there are none)
                # so a concurrent scheduler waits for this transaction.
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM shifts
                    WHERE worker_id=%s AND shift_date=%s AND status<>%s
                    FOR UPDATE
                    """,
                    (new.worker_id, new.shift_date, ShiftStatus.CANCELLED.value),
                )
                clash = find_overlap((self._to_shift(r) for r in fetchall(cur)), new)
                if clash:
                    raise OverlapError(clash.shift_id)

                cur.execute(
                    """
                    INSERT INTO shifts(
                        worker_id, location_id, shift_date, scheduled_start, scheduled_end,
                        shift_type, position, status, is_supervisor_shift, requires_supervisor_present,
                        break_duration_minutes, hourly_rate, rate_was_suggested, notes, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        new.worker_id,
                        new.location_id,
                        new.shift_date,
                        new.scheduled_start,
                        new.scheduled_end,
                        new.shift_type.value,
                        new.position,
                        ShiftStatus.SCHEDULED.value,
                        new.is_supervisor_shift,
                        new.requires_supervisor_present,
                        new.break_duration_minutes,
                        new.hourly_rate,
                        new.rate_was_suggested,
                        new.notes,
                        new.created_at,
                        new.created_at,
                    ),
                )
                return Shift.from_new(int(cur.lastrowid), new)
        except mysql_errors.IntegrityError:
            # Unique key (worker_id, shift_date, active_range) caught an identical range.
            existing = self._find_identical(new)
            if existing is None:
                raise
            raise OverlapError(existing.shift_id)

    def _find_identical(self, new: NewShift) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE worker_id=%s AND shift_date=%s AND status<>%s
                """,
                (new.worker_id, new.shift_date, ShiftStatus.CANCELLED.value),
            )
            return find_overlap((self._to_shift(r) for r in fetchall(cur)), new)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts
                SET status=%s,
                    actual_start=COALESCE(%s, actual_start),
                    actual_end=COALESCE(%s, actual_end),
                    updated_at=%s
                WHERE shift_id=%s AND status=%s
                """,
                (new_status.value, actual_start, actual_end, at, int(shift_id), expected.value),
            )
            return cur.rowcount > 0
