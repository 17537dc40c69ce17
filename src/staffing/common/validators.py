from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.violations import Violation

E = TypeVar("E", bound=Enum)


def check_non_empty(value: Any, field_name: str) -> Optional[Violation]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return Violation(field=field_name, code="required", message=f"{field_name} is required")
    return None


def check_range(value: Any, field_name: str, low: int, high: int, *, code: str) -> Optional[Violation]:
    if not isinstance(value, int) or isinstance(value, bool) or not low <= value <= high:
        return Violation(field=field_name, code=code, message=f"{field_name} must be between {low} and {high}")
    return None


def coerce_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    """Enum member for ``value`` (member or raw value), None if unknown."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        return None


def check_text(value: Any, field_name: str) -> Optional[Violation]:
    if value is not None and not isinstance(value, str):
        return Violation(field=field_name, code="malformed", message=f"{field_name} must be a string")
    return None
