from typing import Annotated

from fastapi import Depends

from polyclinic.api.dependencies import ContainerDep, DbSession
from polyclinic.domains.employees.application import EmployeeService


def get_employee_service(db: DbSession, container: ContainerDep) -> EmployeeService:
    """Get EmployeeService instance with database session."""
    return container.create_employee_service(db)


EmployeeServiceDep = Annotated[EmployeeService, Depends(get_employee_service)]
