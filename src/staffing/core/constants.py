"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

MIN_SHIFT_MINUTES = 30
MAX_SHIFT_MINUTES = 12 * 60
LONG_SHIFT_WARNING_MINUTES = 8 * 60

MIN_BREAK_MINUTES = 0
MAX_BREAK_MINUTES = 120
DEFAULT_BREAK_MINUTES = 30

MINUTES_PER_DAY = 24 * 60

# Suggested hourly rates
REGULAR_RATE = Decimal("15.00")
LEAD_RATE = Decimal("16.50")
SUPERVISOR_RATE = Decimal("18.00")
MANAGER_RATE = Decimal("20.00")

DEFAULT_REQUIRED_COVERAGE = 0
DEFAULT_MAX_CONCURRENT_BREAKS = None


# Client-supplied clock times
CLOCK_FUTURE_SKEW_MINUTES = 2
CLOCK_ADJUSTMENT_TOLERANCE_MINUTES = 5

MAX_REPORT_DAYS = 92
