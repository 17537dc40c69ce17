from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ClockPolicy
from .repository import LocationDirectory


class MySQLLocationDirectory(LocationDirectory):
    """Locations table. A NULL policy column falls back to the same field of ``defaults``."""

    def __init__(self, conn_factory: DatabaseConnection, *, defaults: Optional[ClockPolicy] = None):
        self._conn_factory = conn_factory
        self._defaults = defaults or ClockPolicy()

    def location_exists(self, location_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM locations WHERE location_id=%s", (location_id,))
            return fetchone(cur) is not None

    def get_clock_policy(self, location_id: str) -> Optional[ClockPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT required_coverage, max_concurrent_breaks
                FROM locations
                WHERE location_id=%s
                """,
                (location_id,),
            )
            r = fetchone(cur)
        if not r:
            return None

        required = r.get("required_coverage")
        max_breaks = r.get("max_concurrent_breaks")
        if required is None and max_breaks is None:
            return None
        return ClockPolicy(
            required_coverage=int(required) if required is not None else self._defaults.required_coverage,
            max_concurrent_breaks=(
                int(max_breaks) if max_breaks is not None else self._defaults.max_concurrent_breaks
            ),
        )
