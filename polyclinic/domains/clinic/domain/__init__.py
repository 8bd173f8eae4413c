from polyclinic.domains.clinic.domain.entities import (
    Department,
    MedicalFacility,
    department_validator,
    facility_validator,
)
from polyclinic.domains.clinic.domain.index import DepartmentFacilityIndex

__all__ = [
    "Department",
    "DepartmentFacilityIndex",
    "MedicalFacility",
    "department_validator",
    "facility_validator",
]
