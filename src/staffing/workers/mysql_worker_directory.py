from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..common.validators import coerce_enum
from ..core.enums import EmploymentStatus, Permission
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Worker
from .repository import WorkerDirectory


class MySQLWorkerDirectory(WorkerDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT worker_id, display_name, employment_status, default_hourly_rate
                FROM workers
                WHERE worker_id=%s
                """,
                (worker_id,),
            )
            row = fetchone(cur)
            if not row:
                return None

            cur.execute("SELECT permission FROM worker_permissions WHERE worker_id=%s", (worker_id,))
            perms = (coerce_enum(Permission, r["permission"]) for r in fetchall(cur))

            rate = row.get("default_hourly_rate")
            return Worker(
                worker_id=str(row["worker_id"]),
                display_name=row["display_name"],
                employment_status=EmploymentStatus(row["employment_status"]),
                # Unknown permission strings in the table are ignored, not trusted.
                permissions=frozenset(p for p in perms if p is not None),
                default_hourly_rate=Decimal(str(rate)) if rate is not None else None,
            )
