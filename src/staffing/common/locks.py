from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator


class KeyedLocks:
    """One lock per key, alive only while someone holds or waits for it.

    Used to serialize writes per worker, per location and per (worker, date) within
    one process. Cross-process safety comes from the repositories.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # key -> [lock, holders and waiters]
        self._locks: dict[Hashable, list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            slot = self._locks.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[key]
