"""
Clinic API Routes

Reads are open to every peer service; writes are reserved to top managers.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from polyclinic.api.dependencies import AuthDep
from polyclinic.core.domain import Address, Authority
from polyclinic.core.security.capabilities import require_any_authority
from polyclinic.domains.clinic.api.dependencies import DepartmentServiceDep, FacilityServiceDep
from polyclinic.domains.clinic.api.schemas import (
    DepartmentRequest,
    DepartmentResponse,
    FacilityRequest,
    FacilityResponse,
)
from polyclinic.domains.clinic.domain import Department, MedicalFacility

router = APIRouter(tags=["Clinic"])


# ============================================================
# Departments
# ============================================================


@router.get("/departments", response_model=list[DepartmentResponse])
async def list_departments(
    service: DepartmentServiceDep,
    facility_id: Annotated[int | None, Query(alias="facilityId")] = None,
):
    return await service.list_departments(facility_id)


@router.get("/departments/{department_id}", response_model=DepartmentResponse)
async def get_department(department_id: int, service: DepartmentServiceDep):
    return await service.get_department(department_id)


@router.post("/departments", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(request: DepartmentRequest, service: DepartmentServiceDep, auth: AuthDep):
    require_any_authority(auth, Authority.TOP_MANAGER, action="create department")
    address = Address(**request.address.model_dump()) if request.address else None
    return await service.create(Department(address=address))


@router.patch("/departments/{department_id}", response_model=DepartmentResponse)
async def patch_department(
    department_id: int, request: DepartmentRequest, service: DepartmentServiceDep, auth: AuthDep
):
    require_any_authority(auth, Authority.TOP_MANAGER, action="modify department")
    return await service.update(department_id, request.model_dump(exclude_unset=True))


@router.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_department(department_id: int, service: DepartmentServiceDep, auth: AuthDep) -> None:
    require_any_authority(auth, Authority.TOP_MANAGER, action="delete department")
    await service.delete(department_id)


# ============================================================
# Medical facilities
# ============================================================


@router.get("/facilities", response_model=list[FacilityResponse])
async def list_facilities(
    service: FacilityServiceDep,
    department_id: Annotated[int | None, Query(alias="departmentId")] = None,
):
    return await service.list_facilities(department_id)


@router.get("/facilities/{facility_id}", response_model=FacilityResponse)
async def get_facility(facility_id: int, service: FacilityServiceDep):
    return await service.get_facility(facility_id)


@router.post("/facilities", response_model=FacilityResponse, status_code=status.HTTP_201_CREATED)
async def create_facility(request: FacilityRequest, service: FacilityServiceDep, auth: AuthDep):
    require_any_authority(auth, Authority.TOP_MANAGER, action="create facility")
    facility = MedicalFacility(name=request.name, department_ids=frozenset(request.department_ids or ()))
    return await service.create(facility)


@router.patch("/facilities/{facility_id}", response_model=FacilityResponse)
async def patch_facility(facility_id: int, request: FacilityRequest, service: FacilityServiceDep, auth: AuthDep):
    require_any_authority(auth, Authority.TOP_MANAGER, action="modify facility")
    return await service.update(facility_id, request.model_dump(exclude_unset=True))


@router.delete("/facilities/{facility_id}/departments/{department_id}", response_model=FacilityResponse)
async def unlink_department(facility_id: int, department_id: int, service: FacilityServiceDep, auth: AuthDep):
    require_any_authority(auth, Authority.TOP_MANAGER, action="unlink department")
    return await service.unlink_department(facility_id, department_id)


@router.delete("/facilities/{facility_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_facility(facility_id: int, service: FacilityServiceDep, auth: AuthDep) -> None:
    require_any_authority(auth, Authority.TOP_MANAGER, action="delete facility")
    await service.delete(facility_id)
