from __future__ import annotations

import pytest

from staffing.locations.model import ClockPolicy
from staffing.locations.mysql_location_directory import MySQLLocationDirectory


class FakeCursor:
    def __init__(self, row):
        self._row = row
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append((sql, params))

    def fetchone(self):
        return self._row

    def close(self):
        pass


class FakeConnection:
    def __init__(self, row):
        self.cur = FakeCursor(row)

    def cursor(self, dictionary=False):
        return self.cur

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, row):
        self.row = row

    def connect(self, *, with_database=True):
        return FakeConnection(self.row)


DEFAULTS = ClockPolicy(required_coverage=2, max_concurrent_breaks=3)


@pytest.mark.parametrize(
    "row,expected",
    [
        (None, None),
        ({"required_coverage": None, "max_concurrent_breaks": None}, None),
        ({"required_coverage": None, "max_concurrent_breaks": 1}, ClockPolicy(2, 1)),
        ({"required_coverage": 0, "max_concurrent_breaks": None}, ClockPolicy(0, 3)),
        ({"required_coverage": 1, "max_concurrent_breaks": 1}, ClockPolicy(1, 1)),
    ],
)
def test_null_policy_columns_fall_back_per_field(row, expected):
    directory = MySQLLocationDirectory(FakeConnectionFactory(row), defaults=DEFAULTS)
    assert directory.get_clock_policy("L1") == expected
