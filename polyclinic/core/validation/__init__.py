from polyclinic.core.validation.constraints import (
    ConstraintValidator,
    EntityConstraint,
    FieldConstraint,
    ValidationResult,
    Violation,
    min_length,
    not_blank,
    not_empty,
    not_null,
    past,
    past_or_present,
    positive,
    rule,
    valid_email,
)

__all__ = [
    "ConstraintValidator",
    "EntityConstraint",
    "FieldConstraint",
    "ValidationResult",
    "Violation",
    "min_length",
    "not_blank",
    "not_empty",
    "not_null",
    "past",
    "past_or_present",
    "positive",
    "rule",
    "valid_email",
]
