from __future__ import annotations

from ..core.enums import Permission
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Worker
from .repository import WorkerDirectory


class WorkerService:
    """Resolves worker references and answers permission questions."""

    def __init__(self, workers: WorkerDirectory):
        self._workers = workers

    def get(self, worker_id: str) -> Worker:
        worker = self._workers.get_worker(worker_id) if worker_id else None
        if not worker:
            raise NotFoundError("worker", worker_id)
        return worker

    def get_active(self, worker_id: str) -> Worker:
        worker = self.get(worker_id)
        if not worker.is_active:
            raise ValidationError.single(
                "worker_id",
                "worker_not_active",
                f"Worker {worker_id} is {worker.employment_status.value}",
            )
        return worker

    def require_permission(self, worker_id: str, permission: Permission) -> Worker:
        worker = self.get(worker_id)
        if not worker.is_active or not worker.has_permission(permission):
            raise AuthorizationError(permission)
        return worker
