from typing import Annotated

from fastapi import Depends

from polyclinic.api.dependencies import ContainerDep, DbSession
from polyclinic.domains.results.application import ResultService


def get_result_service(db: DbSession, container: ContainerDep) -> ResultService:
    return container.create_result_service(db)


ResultServiceDep = Annotated[ResultService, Depends(get_result_service)]
