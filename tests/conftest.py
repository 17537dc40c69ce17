from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest

from staffing.container import build_container
from staffing.core.enums import EmploymentStatus, Permission
from staffing.locations.memory_location_directory import InMemoryLocationDirectory
from staffing.locations.model import ClockPolicy, Location
from staffing.workers.memory_worker_directory import InMemoryWorkerDirectory
from staffing.workers.model import Worker

# Monday morning; every test schedules relative to this.
NOW = datetime(2026, 3, 2, 8, 0, 0)


class FakeClock:
    """Settable stand-in for ``now_local``."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, when: datetime) -> datetime:
        self.now = when
        return when


def make_worker(worker_id: str, *perms: Permission, status=EmploymentStatus.ACTIVE, rate=None) -> Worker:
    return Worker(
        worker_id=worker_id,
        display_name=worker_id.upper(),
        employment_status=status,
        permissions=frozenset(perms),
        default_hourly_rate=rate,
    )


@pytest.fixture
def workers():
    return InMemoryWorkerDirectory(
        [
            make_worker("w1", Permission.USE_TIME_CLOCK),
            make_worker("w2", Permission.USE_TIME_CLOCK),
            make_worker("w3", Permission.USE_TIME_CLOCK),
            make_worker("gone", Permission.USE_TIME_CLOCK, status=EmploymentStatus.TERMINATED),
            make_worker("mgr", *Permission),
        ]
    )


@pytest.fixture
def locations():
    return InMemoryLocationDirectory(
        [
            Location("L1", "Main Street"),
            Location("L2", "Harbor", ClockPolicy(required_coverage=1, max_concurrent_breaks=1)),
        ]
    )


@pytest.fixture
def settings():
    return SimpleNamespace(
        STORAGE_BACKEND="memory",
        DEFAULT_REQUIRED_COVERAGE=0,
        DEFAULT_MAX_CONCURRENT_BREAKS=None,
        CLOCK_FUTURE_SKEW_MINUTES=2,
        CLOCK_ADJUSTMENT_TOLERANCE_MINUTES=5,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def container(settings, workers, locations, clock):
    return build_container(settings, workers_repo=workers, locations_repo=locations, clock=clock)


@pytest.fixture
def scheduler(container):
    return container.shift_scheduler


@pytest.fixture
def engine(container):
    return container.time_clock


@pytest.fixture
def now():
    return NOW
