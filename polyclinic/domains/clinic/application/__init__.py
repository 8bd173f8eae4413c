from polyclinic.domains.clinic.application.ports import (
    IDepartmentRepository,
    IFacilityRepository,
    ILinkRepository,
)
from polyclinic.domains.clinic.application.services import DepartmentService, FacilityService

__all__ = [
    "DepartmentService",
    "FacilityService",
    "IDepartmentRepository",
    "IFacilityRepository",
    "ILinkRepository",
]
