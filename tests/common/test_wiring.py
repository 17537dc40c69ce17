from __future__ import annotations

from types import SimpleNamespace

import pytest

from staffing.container import build_container, default_clock_policy
from staffing.database.bootstrap import SCHEMA_PATH, _strip_comments, iter_sql_statements
from staffing.locations.model import ClockPolicy


def test_default_clock_policy_from_settings():
    assert default_clock_policy(SimpleNamespace()) == ClockPolicy(required_coverage=0, max_concurrent_breaks=None)
    env_style = SimpleNamespace(DEFAULT_REQUIRED_COVERAGE="2", DEFAULT_MAX_CONCURRENT_BREAKS="1")
    assert default_clock_policy(env_style) == ClockPolicy(required_coverage=2, max_concurrent_breaks=1)


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        build_container(SimpleNamespace(STORAGE_BACKEND="redis"))


def test_memory_backend_starts_empty():
    container = build_container(SimpleNamespace(STORAGE_BACKEND="memory"))
    assert container.conn is None
    assert container.workers_repo.get_worker("w1") is None
    assert not container.locations_repo.location_exists("L1")


def test_sql_splitter_ignores_semicolons_in_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); SELECT \"x;y\";\nSELECT 1"
    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", 'SELECT "x;y"', "SELECT 1"]


def test_schema_creates_every_table():
    statements = list(iter_sql_statements(_strip_comments(SCHEMA_PATH.read_text(encoding="utf-8"))))
    created = [s.split()[5] for s in statements]
    assert created == ["workers", "worker_permissions", "locations", "shifts", "time_clock_entries", "clock_heads"]
