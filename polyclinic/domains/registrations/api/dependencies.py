from typing import Annotated

from fastapi import Depends

from polyclinic.api.dependencies import ContainerDep, DbSession
from polyclinic.domains.registrations.application import DutyService, RegistrationService


def get_duty_service(db: DbSession, container: ContainerDep) -> DutyService:
    return container.create_duty_service(db)


def get_registration_service(db: DbSession, container: ContainerDep) -> RegistrationService:
    return container.create_registration_service(db)


DutyServiceDep = Annotated[DutyService, Depends(get_duty_service)]
RegistrationServiceDep = Annotated[RegistrationService, Depends(get_registration_service)]
