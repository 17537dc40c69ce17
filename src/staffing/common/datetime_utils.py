from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, Union

from ..core.constants import MINUTES_PER_DAY

TimeLike = Union[time, str, None]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into naive local time.

    Timestamps with an offset (or ``Z``) are converted to local time first.
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.replace(tzinfo=None)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_clock_time(value: TimeLike) -> Optional[time]:
    """Accept ``time`` or ``HH:MM`` / ``HH:MM:SS``. Returns None when malformed."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        return None
    v = value.strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    return None


def minutes_of_day(t: time) -> int:
    return t.hour * 60 + t.minute


def shift_duration_minutes(start: time, end: time) -> int:
    """Scheduled length in minutes; ``end < start`` wraps past midnight."""
    diff = minutes_of_day(end) - minutes_of_day(start)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff


def minute_range(start: time, end: time) -> tuple[int, int]:
    """Half-open ``[start, end)`` in minutes from the shift date's midnight."""
    begin = minutes_of_day(start)
    return begin, begin + shift_duration_minutes(start, end)


def ranges_overlap(a: tuple[int, int], b: tuple[int, int]) -> bool:
    return a[0] < b[1] and b[0] < a[1]


def add_days(day: date, days: int) -> date:
    """``day + days``, clamped to the calendar ``date`` can represent."""
    try:
        return day + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def week_start(day: date) -> date:
    """Sunday that starts the week containing ``day``."""
    return add_days(day, -((day.weekday() + 1) % 7))


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        if day == end:
            return
        day += timedelta(days=1)


def minutes_between(start: datetime, end: datetime) -> int:
    return max(int((end - start).total_seconds() // 60), 0)
