from __future__ import annotations

from typing import Optional, Protocol

from .model import ClockPolicy


class LocationDirectory(Protocol):
    def location_exists(self, location_id: str) -> bool:
        raise NotImplementedError

    def get_clock_policy(self, location_id: str) -> Optional[ClockPolicy]:
        """Location-specific policy, or None to fall back to configured defaults.

        Fields the location leaves unset take the configured default.
        """

        raise NotImplementedError
