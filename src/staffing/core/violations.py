from __future__ import annotations

from dataclasses import dataclass, field

from .enums import Severity


@dataclass(frozen=True)
class Violation:
    """A single broken rule on an input field."""

    field: str
    code: str
    message: str
    severity: Severity = Severity.ERROR

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass
class ValidationResult:
    """Outcome of a validation pass. Warnings never make it invalid."""

    violations: list[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def errors(self) -> list[Violation]:
        return [v for v in self.violations if v.is_error]

    @property
    def warnings(self) -> list[Violation]:
        return [v for v in self.violations if not v.is_error]

    def add(self, violation: Violation | None) -> None:
        if violation is not None:
            self.violations.append(violation)
