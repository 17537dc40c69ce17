from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from ...workers.model import Worker
from ..model import ShiftDraft


class RatePolicy(ABC):
    """Suggests an hourly rate for a shift (Strategy Pattern)."""

    @abstractmethod
    def suggest(self, draft: ShiftDraft, worker: Optional[Worker] = None) -> Decimal:
        raise NotImplementedError

    def resolve(self, draft: ShiftDraft, worker: Optional[Worker] = None) -> tuple[Decimal, bool]:
        """Explicit rate when given, otherwise the suggestion. Second item: was suggested."""
        if draft.hourly_rate is not None:
            return Decimal(str(draft.hourly_rate)), False
        return self.suggest(draft, worker), True
