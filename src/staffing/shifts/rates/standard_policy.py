from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ...core.constants import LEAD_RATE, MANAGER_RATE, REGULAR_RATE, SUPERVISOR_RATE
from ...workers.model import Worker
from ..model import ShiftDraft
from .base import RatePolicy


class StandardRatePolicy(RatePolicy):
    """Highest applicable of: base, "lead" position, supervisor shift, "manager" position.

    The base is the regular rate, or the worker's own default when that is higher.
    """

    def __init__(
        self,
        *,
        regular: Decimal = REGULAR_RATE,
        lead: Decimal = LEAD_RATE,
        supervisor: Decimal = SUPERVISOR_RATE,
        manager: Decimal = MANAGER_RATE,
    ):
        self._regular = regular
        self._lead = lead
        self._supervisor = supervisor
        self._manager = manager

    def suggest(self, draft: ShiftDraft, worker: Optional[Worker] = None) -> Decimal:
        candidates = [self._regular]
        if worker is not None and worker.default_hourly_rate is not None:
            candidates.append(worker.default_hourly_rate)

        position = (draft.position or "").lower()
        if "lead" in position:
            candidates.append(self._lead)
        if draft.is_supervisor_shift:
            candidates.append(self._supervisor)
        if "manager" in position:
            candidates.append(self._manager)
        return max(candidates)
