from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from ..core.enums import EmploymentStatus, Permission


@dataclass(frozen=True)
class Worker:
    """Domain entity: a schedulable person.

    Owned by the personnel directory; this package only reads it.
    """

    worker_id: str
    display_name: str
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE
    permissions: frozenset[Permission] = field(default_factory=frozenset)
    default_hourly_rate: Optional[Decimal] = None

    @property
    def is_active(self) -> bool:
        return self.employment_status == EmploymentStatus.ACTIVE

    def has_permission(self, permission: Permission) -> bool:
        return permission in self.permissions
