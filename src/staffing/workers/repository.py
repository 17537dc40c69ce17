from __future__ import annotations

from typing import Optional, Protocol

from .model import Worker


class WorkerDirectory(Protocol):
    """Read-only view of the personnel directory.

    Note (DIP): services depend on this interface, never on a concrete store.
    """

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        raise NotImplementedError
