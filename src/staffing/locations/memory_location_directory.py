from __future__ import annotations

from typing import Iterable, Optional

from .model import ClockPolicy, Location
from .repository import LocationDirectory


class InMemoryLocationDirectory(LocationDirectory):
    def __init__(self, locations: Iterable[Location] = ()):
        self._by_id = {loc.location_id: loc for loc in locations}

    def add(self, location: Location) -> None:
        self._by_id[location.location_id] = location

    def location_exists(self, location_id: str) -> bool:
        return location_id in self._by_id

    def get_clock_policy(self, location_id: str) -> Optional[ClockPolicy]:
        loc = self._by_id.get(location_id)
        return loc.clock_policy if loc else None
