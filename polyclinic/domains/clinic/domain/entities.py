"""
Clinic Entities

Departments and medical facilities reference each other only through ID
sets. Both sets are projections of one association kept by
DepartmentFacilityIndex.
"""

from dataclasses import dataclass

from polyclinic.core.domain import Address, Entity
from polyclinic.core.validation import ConstraintValidator, not_blank, not_empty, not_null, positive


@dataclass(kw_only=True)
class Department(Entity[int]):
    address: Address | None = None
    facility_ids: frozenset[int] = frozenset()


@dataclass(kw_only=True)
class MedicalFacility(Entity[int]):
    name: str | None = None
    department_ids: frozenset[int] = frozenset()


ADDRESS_CONSTRAINTS = (
    not_blank("address.country", "Country is mandatory"),
    not_blank("address.state", "State is mandatory"),
    not_blank("address.city", "City is mandatory"),
    not_blank("address.street", "Street is mandatory"),
    not_null("address.house_number", "House number is mandatory"),
    positive("address.house_number", "House number must be positive"),
)

department_validator: ConstraintValidator[Department] = ConstraintValidator(
    not_null("address", "Address is mandatory"),
    *ADDRESS_CONSTRAINTS,
)

facility_validator: ConstraintValidator[MedicalFacility] = ConstraintValidator(
    not_blank("name", "Name is mandatory"),
    not_empty("department_ids", "Departments are mandatory"),
)
