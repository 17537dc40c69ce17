from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClockPolicy:
    """Per-location break limits enforced by the time clock.

    ``required_coverage``: workers that must stay CLOCKED_IN when someone starts a break.
    ``max_concurrent_breaks``: cap on workers ON_BREAK at once; None means no cap.
    """

    required_coverage: int = 0
    max_concurrent_breaks: Optional[int] = None


@dataclass(frozen=True)
class Location:
    location_id: str
    name: str
    clock_policy: Optional[ClockPolicy] = None
