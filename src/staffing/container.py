from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from .common.datetime_utils import now_local
from .core.constants import (
    CLOCK_ADJUSTMENT_TOLERANCE_MINUTES,
    CLOCK_FUTURE_SKEW_MINUTES,
    DEFAULT_MAX_CONCURRENT_BREAKS,
    DEFAULT_REQUIRED_COVERAGE,
)
from .coverage.service import CoverageReportService
from .database.connection import DBConfig, DatabaseConnection
from .locations.memory_location_directory import InMemoryLocationDirectory
from .locations.model import ClockPolicy
from .locations.mysql_location_directory import MySQLLocationDirectory
from .locations.repository import LocationDirectory
from .shifts.memory_shift_repository import InMemoryShiftRepository
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.scheduler import ShiftScheduler
from .timeclock.engine import TimeClockEngine
from .timeclock.memory_time_clock_repository import InMemoryTimeClockRepository
from .timeclock.mysql_time_clock_repository import MySQLTimeClockRepository
from .timeclock.repository import TimeClockRepository
from .workers.memory_worker_directory import InMemoryWorkerDirectory
from .workers.mysql_worker_directory import MySQLWorkerDirectory
from .workers.repository import WorkerDirectory
from .workers.service import WorkerService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    workers_repo: WorkerDirectory
    locations_repo: LocationDirectory
    shifts_repo: ShiftRepository
    clock_repo: TimeClockRepository

    worker_service: WorkerService
    shift_scheduler: ShiftScheduler
    time_clock: TimeClockEngine
    coverage_service: CoverageReportService


def default_clock_policy(settings: Any) -> ClockPolicy:
    max_breaks = getattr(settings, "DEFAULT_MAX_CONCURRENT_BREAKS", DEFAULT_MAX_CONCURRENT_BREAKS)
    return ClockPolicy(
        required_coverage=int(getattr(settings, "DEFAULT_REQUIRED_COVERAGE", DEFAULT_REQUIRED_COVERAGE) or 0),
        max_concurrent_breaks=int(max_breaks) if max_breaks not in (None, "") else None,
    )


def _minutes(settings: Any, name: str, default: int) -> timedelta:
    return timedelta(minutes=int(getattr(settings, name, default)))


def build_container(
    settings: Any,
    *,
    workers_repo: Optional[WorkerDirectory] = None,
    locations_repo: Optional[LocationDirectory] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire repositories and services for the configured ``STORAGE_BACKEND``.

    Directories passed in explicitly win over the backend's own; the memory backend
    otherwise starts with empty ones.
    """
    backend = str(getattr(settings, "STORAGE_BACKEND", "mysql")).lower()
    policy = default_clock_policy(settings)

    conn: Optional[DatabaseConnection] = None
    if backend == "memory":
        workers_repo = workers_repo or InMemoryWorkerDirectory()
        locations_repo = locations_repo or InMemoryLocationDirectory()
        shifts_repo: ShiftRepository = InMemoryShiftRepository()
        clock_repo: TimeClockRepository = InMemoryTimeClockRepository()
    elif backend == "mysql":
        conn = DatabaseConnection(DBConfig.from_mapping(getattr(settings, "DB_CONFIG")))
        workers_repo = workers_repo or MySQLWorkerDirectory(conn)
        locations_repo = locations_repo or MySQLLocationDirectory(conn, defaults=policy)
        shifts_repo = MySQLShiftRepository(conn)
        clock_repo = MySQLTimeClockRepository(conn)
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND {backend!r}")

    worker_service = WorkerService(workers_repo)
    shift_scheduler = ShiftScheduler(shifts_repo, worker_service, locations_repo, clock=clock)
    time_clock = TimeClockEngine(
        clock_repo,
        worker_service,
        locations_repo,
        scheduler=shift_scheduler,
        default_policy=policy,
        clock=clock,
        future_skew=_minutes(settings, "CLOCK_FUTURE_SKEW_MINUTES", CLOCK_FUTURE_SKEW_MINUTES),
        adjustment_tolerance=_minutes(
            settings, "CLOCK_ADJUSTMENT_TOLERANCE_MINUTES", CLOCK_ADJUSTMENT_TOLERANCE_MINUTES
        ),
    )
    coverage_service = CoverageReportService(shifts_repo, clock_repo, locations_repo, clock=clock)

    return Container(
        conn=conn,
        workers_repo=workers_repo,
        locations_repo=locations_repo,
        shifts_repo=shifts_repo,
        clock_repo=clock_repo,
        worker_service=worker_service,
        shift_scheduler=shift_scheduler,
        time_clock=time_clock,
        coverage_service=coverage_service,
    )
