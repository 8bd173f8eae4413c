from typing import Annotated

from fastapi import Depends

from polyclinic.api.dependencies import ContainerDep, DbSession
from polyclinic.domains.clinic.application import DepartmentService, FacilityService


def get_department_service(db: DbSession, container: ContainerDep) -> DepartmentService:
    return container.create_department_service(db)


def get_facility_service(db: DbSession, container: ContainerDep) -> FacilityService:
    return container.create_facility_service(db)


DepartmentServiceDep = Annotated[DepartmentService, Depends(get_department_service)]
FacilityServiceDep = Annotated[FacilityService, Depends(get_facility_service)]
