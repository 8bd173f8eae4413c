from polyclinic.domains.employees.domain.entities import (
    Employee,
    PersonalData,
    Role,
    foreign_role_fields,
    has_department,
    validator_for,
)

__all__ = [
    "Employee",
    "PersonalData",
    "Role",
    "foreign_role_fields",
    "has_department",
    "validator_for",
]
