"""
Employee Entities

Doctors, team managers and top managers share one record. The role tag
decides which role fields apply and which constraints are checked.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from polyclinic.core.domain import Address, Entity, Sex, StatusEnum, ValueObject
from polyclinic.core.validation import (
    ConstraintValidator,
    min_length,
    not_blank,
    not_null,
    past,
    past_or_present,
    positive,
    rule,
    valid_email,
)


class Role(StatusEnum):
    DOCTOR = "DOCTOR"
    TEAM_MANAGER = "TEAM_MANAGER"
    TOP_MANAGER = "TOP_MANAGER"


@dataclass(frozen=True)
class PersonalData(ValueObject):
    name: str | None = None
    phone: str | None = None
    salary: Decimal | None = None
    hire_date: date | None = None
    date_of_birth: date | None = None
    sex: Sex | None = None
    address: Address | None = None


@dataclass(kw_only=True)
class Employee(Entity[int]):
    role: Role | None = None
    email: str | None = None
    password: str | None = None
    personal_data: PersonalData | None = None
    department_id: int | None = None
    enabled: bool = True

    # Doctor
    specialty: str | None = None
    practice_beginning_date: date | None = None

    # Team manager
    team: frozenset[int] = frozenset()


ROLE_FIELDS: dict[Role, frozenset[str]] = {
    Role.DOCTOR: frozenset({"specialty", "practice_beginning_date"}),
    Role.TEAM_MANAGER: frozenset({"team"}),
    Role.TOP_MANAGER: frozenset(),
}
ALL_ROLE_FIELDS = frozenset().union(*ROLE_FIELDS.values())


def has_department(role: Role) -> bool:
    """Doctors and team managers work in a department; top managers do not."""
    return role in (Role.DOCTOR, Role.TEAM_MANAGER)


def foreign_role_fields(role: Role) -> frozenset[str]:
    """Role fields that do not belong to `role`."""
    return ALL_ROLE_FIELDS - ROLE_FIELDS[role]


_employee_constraints = ConstraintValidator(
    not_blank("email", "Email is mandatory"),
    valid_email("email", "Email must be valid"),
    not_blank("password", "Password is mandatory"),
    min_length("password", 8, "Password must be at least 8 characters long"),
    not_null("personal_data", "Personal data is mandatory"),
    not_blank("personal_data.name", "Name is mandatory"),
    not_blank("personal_data.phone", "Phone is mandatory"),
    not_null("personal_data.salary", "Salary is mandatory"),
    positive("personal_data.salary", "Salary must be positive"),
    not_null("personal_data.hire_date", "Hire date is mandatory"),
    past_or_present("personal_data.hire_date", "Hire date must be in the past or present"),
    not_null("personal_data.date_of_birth", "Date of birth is mandatory"),
    past("personal_data.date_of_birth", "Date of birth must be in the past"),
    not_null("personal_data.sex", "Sex is mandatory"),
    not_null("personal_data.address", "Address is mandatory"),
    not_blank("personal_data.address.country", "Country is mandatory"),
    not_blank("personal_data.address.state", "State is mandatory"),
    not_blank("personal_data.address.city", "City is mandatory"),
    not_blank("personal_data.address.street", "Street is mandatory"),
    not_null("personal_data.address.house_number", "House number is mandatory"),
    positive("personal_data.address.house_number", "House number must be positive"),
)

_department_constraints = (not_null("department_id", "Department ID is mandatory"),)

EMPLOYEE_VALIDATORS: dict[Role, ConstraintValidator[Employee]] = {
    Role.DOCTOR: _employee_constraints.extend(
        *_department_constraints,
        not_blank("specialty", "Specialty is mandatory"),
        not_null("practice_beginning_date", "Practice beginning date is mandatory"),
        past_or_present("practice_beginning_date", "Practice beginning date must be in the past or present"),
    ),
    Role.TEAM_MANAGER: _employee_constraints.extend(*_department_constraints),
    Role.TOP_MANAGER: _employee_constraints.extend(
        rule("department_id", "Top managers do not belong to a department", lambda e: e.department_id is None),
    ),
}


def validator_for(role: Role) -> ConstraintValidator[Employee]:
    return EMPLOYEE_VALIDATORS[role]
