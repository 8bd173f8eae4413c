"""
Constraint Validator

Declarative field constraints evaluated all at once. Every violation is
collected so a client can fix a request in one round trip; the caller
raises a single ValidationException with the aggregated message.
"""

import re
from collections.abc import Callable, Sized
from dataclasses import dataclass
from datetime import date
from typing import Any, Generic, TypeVar

from polyclinic.core.domain import ValidationException

T = TypeVar("T")

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_MISSING = object()


@dataclass(frozen=True)
class Violation:
    """A single failed constraint."""

    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Violations of one entity, empty when it may be persisted."""

    violations: tuple[Violation, ...] = ()

    SEPARATOR = ", "

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def message(self) -> str:
        """Violation messages joined, lower-cased, without a trailing separator."""
        joined = "".join(f"{violation.message}{self.SEPARATOR}" for violation in self.violations)
        return joined.removesuffix(self.SEPARATOR).lower()

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(self.violations + other.violations)

    def raise_if_invalid(self) -> None:
        """
        Raises:
            ValidationException: With the aggregated message
        """
        if self.is_valid:
            return
        raise ValidationException(
            self.message,
            details={"violations": [{"field": v.field, "message": v.message} for v in self.violations]},
        )


def _read(entity: Any, path: str) -> Any:
    """Follow a dotted attribute path; an absent parent yields _MISSING."""
    value = entity
    for part in path.split("."):
        if value is None:
            return _MISSING
        value = getattr(value, part)
    return value


@dataclass(frozen=True)
class FieldConstraint:
    """
    One check on one (possibly nested) field.

    Format and range checks skip None values; presence is its own constraint.
    A constraint on a nested field is skipped when the parent object is absent,
    the parent's own presence constraint reports that case.
    """

    path: str
    message: str
    check: Callable[[Any], bool]
    skip_none: bool = True

    def evaluate(self, entity: Any) -> Violation | None:
        value = _read(entity, self.path)
        if value is _MISSING:
            return None
        if value is None and self.skip_none:
            return None
        if self.check(value):
            return None
        return Violation(self.path, self.message)


@dataclass(frozen=True)
class EntityConstraint:
    """A cross-field rule over the whole entity."""

    path: str
    message: str
    check: Callable[[Any], bool]

    def evaluate(self, entity: Any) -> Violation | None:
        return None if self.check(entity) else Violation(self.path, self.message)


Constraint = FieldConstraint | EntityConstraint


def not_null(path: str, message: str) -> FieldConstraint:
    return FieldConstraint(path, message, lambda value: value is not None, skip_none=False)


def not_blank(path: str, message: str) -> FieldConstraint:
    return FieldConstraint(
        path, message, lambda value: isinstance(value, str) and value.strip() != "", skip_none=False
    )


def not_empty(path: str, message: str) -> FieldConstraint:
    return FieldConstraint(
        path, message, lambda value: isinstance(value, Sized) and len(value) > 0, skip_none=False
    )


def valid_email(path: str, message: str = "Email must be valid") -> FieldConstraint:
    return FieldConstraint(path, message, lambda value: bool(EMAIL_PATTERN.match(value)))


def min_length(path: str, length: int, message: str) -> FieldConstraint:
    return FieldConstraint(path, message, lambda value: len(value) >= length)


def positive(path: str, message: str) -> FieldConstraint:
    return FieldConstraint(path, message, lambda value: value > 0)


def past(path: str, message: str) -> FieldConstraint:
    return FieldConstraint(path, message, lambda value: value < date.today())


def past_or_present(path: str, message: str) -> FieldConstraint:
    return FieldConstraint(path, message, lambda value: value <= date.today())


def rule(path: str, message: str, check: Callable[[Any], bool]) -> EntityConstraint:
    return EntityConstraint(path, message, check)


class ConstraintValidator(Generic[T]):
    """
    Ordered set of constraints for one entity type.

    Example:
        ```python
        validator = ConstraintValidator(
            not_blank("email", "Email is mandatory"),
            valid_email("email"),
            min_length("password", 8, "Password must be at least 8 characters long"),
        )
        validator.validate(client).raise_if_invalid()
        ```
    """

    def __init__(self, *constraints: Constraint):
        self._constraints: tuple[Constraint, ...] = constraints

    @property
    def constraints(self) -> tuple[Constraint, ...]:
        return self._constraints

    def extend(self, *constraints: Constraint) -> "ConstraintValidator[T]":
        """Return a validator with additional constraints appended."""
        return ConstraintValidator(*self._constraints, *constraints)

    def validate(self, entity: T) -> ValidationResult:
        """Evaluate every constraint without short-circuiting."""
        violations = []
        for constraint in self._constraints:
            violation = constraint.evaluate(entity)
            if violation is not None:
                violations.append(violation)
        return ValidationResult(tuple(violations))

    def check(self, entity: T) -> None:
        """Validate and raise the aggregated ValidationException."""
        self.validate(entity).raise_if_invalid()
