from polyclinic.domains.clinic.infrastructure.models import DepartmentModel, FacilityModel, department_facility
from polyclinic.domains.clinic.infrastructure.repositories import (
    SQLAlchemyDepartmentRepository,
    SQLAlchemyFacilityRepository,
    SQLAlchemyLinkRepository,
)

__all__ = [
    "DepartmentModel",
    "FacilityModel",
    "SQLAlchemyDepartmentRepository",
    "SQLAlchemyFacilityRepository",
    "SQLAlchemyLinkRepository",
    "department_facility",
]
