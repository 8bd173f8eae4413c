"""
Employee API Routes

The three roles expose the same surface under their own prefix; only the
schemas and the authorities allowed to create or delete differ.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from polyclinic.api.dependencies import AuthDep
from polyclinic.core.domain import Authority
from polyclinic.core.persistence import merge
from polyclinic.core.security.capabilities import require_any_authority
from polyclinic.domains.employees.api.dependencies import EmployeeServiceDep
from polyclinic.domains.employees.api.schemas import (
    DoctorRequest,
    DoctorResponse,
    TeamManagerPatch,
    TeamManagerRequest,
    TeamManagerResponse,
    TopManagerRequest,
    TopManagerResponse,
)
from polyclinic.domains.employees.application import ROLE_LABELS
from polyclinic.domains.employees.domain import Employee, Role


def build_role_router(
    role: Role,
    prefix: str,
    request_model: type[BaseModel],
    patch_model: type[BaseModel],
    response_model: type[BaseModel],
    managed_by: tuple[Authority, ...],
) -> APIRouter:
    """
    Routes of one employee role.

    Args:
        managed_by: Authorities allowed to create and delete employees of this role
    """
    router = APIRouter(prefix=prefix, tags=[f"{ROLE_LABELS[role]}s"])
    label = ROLE_LABELS[role].lower()

    @router.get("", response_model=list[response_model])
    async def list_employees(
        service: EmployeeServiceDep,
        department_id: Annotated[int | None, Query(alias="departmentId")] = None,
        specialty: str | None = None,
        email: str | None = None,
    ):
        return await service.list_employees(role, department_id=department_id, specialty=specialty, email=email)

    @router.get("/{employee_id}", response_model=response_model)
    async def get_employee(employee_id: int, service: EmployeeServiceDep):
        """Resolve-by-ID contract consumed by peer services."""
        return await service.get_employee(role, employee_id)

    @router.post("", response_model=response_model, status_code=status.HTTP_201_CREATED)
    async def create_employee(request: request_model, service: EmployeeServiceDep, auth: AuthDep):
        require_any_authority(auth, *managed_by, action=f"create {label}")
        employee = merge(Employee(role=role), request.model_dump())
        return await service.create(employee, auth)

    @router.patch("/{employee_id}", response_model=response_model)
    async def patch_employee(employee_id: int, request: patch_model, service: EmployeeServiceDep, auth: AuthDep):
        patch = request.model_dump(exclude_unset=True)
        clear = ("team",) if patch.pop("clear_team", False) else ()
        return await service.update(role, employee_id, patch, auth, clear=clear)

    @router.patch("/{employee_id}/status", response_model=response_model)
    async def change_employee_status(
        employee_id: int,
        is_active: Annotated[bool, Query(alias="isActive")],
        service: EmployeeServiceDep,
        auth: AuthDep,
    ):
        return await service.set_enabled(role, employee_id, is_active, auth)

    @router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_employee(employee_id: int, service: EmployeeServiceDep, auth: AuthDep) -> None:
        require_any_authority(auth, *managed_by, action=f"delete {label}")
        await service.delete(role, employee_id)

    return router


doctors_router = build_role_router(
    Role.DOCTOR,
    "/doctors",
    DoctorRequest,
    DoctorRequest,
    DoctorResponse,
    managed_by=(Authority.TOP_MANAGER, Authority.TEAM_MANAGER),
)
team_managers_router = build_role_router(
    Role.TEAM_MANAGER,
    "/team-managers",
    TeamManagerRequest,
    TeamManagerPatch,
    TeamManagerResponse,
    managed_by=(Authority.TOP_MANAGER,),
)
top_managers_router = build_role_router(
    Role.TOP_MANAGER,
    "/top-managers",
    TopManagerRequest,
    TopManagerRequest,
    TopManagerResponse,
    managed_by=(Authority.TOP_MANAGER,),
)

router = APIRouter()
router.include_router(doctors_router)
router.include_router(team_managers_router)
router.include_router(top_managers_router)
