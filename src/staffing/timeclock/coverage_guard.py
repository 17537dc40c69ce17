from __future__ import annotations

from ..core.exceptions import CoverageViolationError
from ..locations.model import ClockPolicy
from .model import LocationSnapshot


class CoverageGuard:
    """Decides whether one more worker may start a break at a location."""

    def __init__(self, policy: ClockPolicy):
        self.policy = policy

    def check_break_start(self, snapshot: LocationSnapshot) -> None:
        clocked_in = len(snapshot.clocked_in)
        on_break = len(snapshot.on_break)

        # The requesting worker is one of the clocked-in workers.
        if clocked_in - 1 < self.policy.required_coverage:
            raise CoverageViolationError(
                snapshot.location_id,
                "below_required_coverage",
                clocked_in=clocked_in,
                required_coverage=self.policy.required_coverage,
            )

        limit = self.policy.max_concurrent_breaks
        if limit is not None and on_break + 1 > limit:
            raise CoverageViolationError(
                snapshot.location_id,
                "max_concurrent_breaks",
                on_break=on_break,
                max_concurrent_breaks=limit,
            )

    __call__ = check_break_start
