from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from staffing.core.enums import Permission
from staffing.shifts.model import ShiftDraft
from staffing.shifts.rates.standard_policy import StandardRatePolicy
from staffing.workers.model import Worker


def _draft(position="Cashier", supervisor=False, rate=None) -> ShiftDraft:
    return ShiftDraft(
        worker_id="w1",
        location_id="L1",
        shift_date=date(2026, 3, 3),
        scheduled_start="09:00",
        scheduled_end="17:00",
        position=position,
        is_supervisor_shift=supervisor,
        hourly_rate=rate,
    )


@pytest.mark.parametrize(
    "position,supervisor,expected",
    [
        ("Cashier", False, "15.00"),
        ("Shift Lead", False, "16.50"),
        ("Cashier", True, "18.00"),
        ("Shift Lead", True, "18.00"),
        ("Store Manager", False, "20.00"),
        ("Assistant MANAGER", True, "20.00"),
    ],
)
def test_suggested_rate_takes_highest_applicable(position, supervisor, expected):
    assert StandardRatePolicy().suggest(_draft(position, supervisor)) == Decimal(expected)


def test_worker_default_rate_raises_the_base_only():
    policy = StandardRatePolicy()
    senior = Worker("w9", "Senior", permissions=frozenset({Permission.USE_TIME_CLOCK}), default_hourly_rate=Decimal("17.25"))

    assert policy.suggest(_draft(), senior) == Decimal("17.25")
    assert policy.suggest(_draft(supervisor=True), senior) == Decimal("18.00")


def test_explicit_rate_is_never_overridden():
    rate, suggested = StandardRatePolicy().resolve(_draft("Store Manager", True, rate=Decimal("12.00")))
    assert rate == Decimal("12.00")
    assert suggested is False

    rate, suggested = StandardRatePolicy().resolve(_draft("Store Manager"))
    assert rate == Decimal("20.00")
    assert suggested is True
