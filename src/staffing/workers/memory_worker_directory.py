from __future__ import annotations

from typing import Iterable, Optional

from .model import Worker
from .repository import WorkerDirectory


class InMemoryWorkerDirectory(WorkerDirectory):
    def __init__(self, workers: Iterable[Worker] = ()):
        self._by_id = {w.worker_id: w for w in workers}

    def add(self, worker: Worker) -> None:
        self._by_id[worker.worker_id] = worker

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        return self._by_id.get(worker_id)
