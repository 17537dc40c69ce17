from __future__ import annotations

from typing import Any, Iterable, Optional

from .enums import Permission
from .violations import Violation


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable ``kind`` and structured detail so callers can
    render a message without parsing ``str(error)``.
    """

    kind = "domain_error"

    def details(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": str(self), **self.details()}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation"

    def __init__(self, violations: Iterable[Violation]):
        self.violations = list(violations)
        super().__init__("; ".join(v.message for v in self.violations) or "Invalid input")

    @classmethod
    def single(cls, field: str, code: str, message: str) -> "ValidationError":
        return cls([Violation(field=field, code=code, message=message)])

    def details(self) -> dict[str, Any]:
        return {"violations": [v.to_dict() for v in self.violations]}


class InvalidTransitionError(DomainError):
    """Raised when a state machine is asked for an edge it does not have."""

    kind = "invalid_transition"

    def __init__(self, from_state: Any, attempted: Any, *, subject: str, subject_id: Any = None):
        self.from_state = from_state
        self.attempted = attempted
        self.subject = subject
        self.subject_id = subject_id
        super().__init__(f"Cannot apply {_value(attempted)} to {subject} in state {_value(from_state)}")

    def details(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "subject_id": self.subject_id,
            "from": _value(self.from_state),
            "attempted": _value(self.attempted),
        }


class CoverageViolationError(DomainError):
    """Raised when a break would leave a location under-staffed."""

    kind = "coverage_violation"

    def __init__(self, location_id: str, reason: str, **counts: Any):
        self.location_id = location_id
        self.reason = reason
        self.counts = counts
        super().__init__(f"Coverage rule '{reason}' blocks this action at location {location_id}")

    def details(self) -> dict[str, Any]:
        return {"location_id": self.location_id, "reason": self.reason, **self.counts}


class OverlapError(DomainError):
    """Raised when a worker already holds an overlapping shift that day."""

    kind = "overlap"

    def __init__(self, existing_shift_id: int):
        self.existing_shift_id = existing_shift_id
        super().__init__(f"Overlaps existing shift {existing_shift_id}")

    def details(self) -> dict[str, Any]:
        return {"existing_shift_id": self.existing_shift_id}


class NotFoundError(DomainError):
    """Raised when a worker, location or shift reference does not resolve."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")

    def details(self) -> dict[str, Any]:
        return {"entity": self.entity, "id": self.entity_id}


class AuthorizationError(DomainError):
    """Raised when a worker lacks permission for an action."""

    kind = "forbidden"

    def __init__(self, permission: Optional[Permission] = None, message: Optional[str] = None):
        self.permission = permission
        super().__init__(message or f"Missing permission {_value(permission)}")

    def details(self) -> dict[str, Any]:
        return {"permission": _value(self.permission)}


def _value(v: Any) -> Any:
    return getattr(v, "value", v)
