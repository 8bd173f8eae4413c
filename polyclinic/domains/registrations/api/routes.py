"""
Registration API Routes
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from polyclinic.api.dependencies import AuthDep
from polyclinic.core.domain import Authority
from polyclinic.core.security.capabilities import require_any_authority, require_authenticated
from polyclinic.domains.registrations.api.dependencies import DutyServiceDep, RegistrationServiceDep
from polyclinic.domains.registrations.api.schemas import (
    DutyRequest,
    DutyResponse,
    RegistrationCreate,
    RegistrationRequest,
)
from polyclinic.domains.registrations.application import DutyView, RegistrationView
from polyclinic.domains.registrations.domain import Duty, Registration

router = APIRouter(tags=["Registrations"])


# ============================================================
# Duties
# ============================================================


@router.get("/duties", response_model=list[DutyView])
async def list_duties(
    service: DutyServiceDep,
    auth: AuthDep,
    needed_specialty: Annotated[str | None, Query(alias="neededSpecialty")] = None,
):
    return await service.list_duties(auth, needed_specialty=needed_specialty)


@router.get("/duties/{duty_id}", response_model=DutyView)
async def get_duty(duty_id: int, service: DutyServiceDep, auth: AuthDep):
    """Resolve-by-ID contract consumed by the results service."""
    return await service.get_view(duty_id, auth)


@router.post("/duties", response_model=DutyResponse, status_code=status.HTTP_201_CREATED)
async def create_duty(request: DutyRequest, service: DutyServiceDep, auth: AuthDep):
    require_any_authority(auth, Authority.TOP_MANAGER, action="create duty")
    return await service.create(Duty(**request.model_dump()))


@router.patch("/duties/{duty_id}", response_model=DutyResponse)
async def patch_duty(duty_id: int, request: DutyRequest, service: DutyServiceDep, auth: AuthDep):
    require_any_authority(auth, Authority.TOP_MANAGER, action="modify duty")
    return await service.update(duty_id, request.model_dump(exclude_unset=True))


@router.delete("/duties/{duty_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_duty(duty_id: int, service: DutyServiceDep, auth: AuthDep) -> None:
    require_any_authority(auth, Authority.TOP_MANAGER, action="delete duty")
    await service.delete(duty_id)


# ============================================================
# Registrations
# ============================================================


@router.get("/registrations", response_model=list[RegistrationView])
async def list_registrations(
    service: RegistrationServiceDep,
    auth: AuthDep,
    doctor_id: Annotated[int | None, Query(alias="doctorId")] = None,
    client_id: Annotated[int | None, Query(alias="clientId")] = None,
):
    require_authenticated(auth)
    return await service.list_registrations(auth, doctor_id=doctor_id, client_id=client_id)


@router.get("/registrations/{registration_id}", response_model=RegistrationView)
async def get_registration(registration_id: int, service: RegistrationServiceDep, auth: AuthDep):
    return await service.get_view(registration_id, auth)


@router.post("/registrations", response_model=RegistrationView, status_code=status.HTTP_201_CREATED)
async def create_registration(request: RegistrationCreate, service: RegistrationServiceDep, auth: AuthDep):
    require_authenticated(auth)
    return await service.create(Registration(**request.model_dump()), auth)


@router.patch("/registrations/{registration_id}", response_model=RegistrationView)
async def patch_registration(
    registration_id: int, request: RegistrationRequest, service: RegistrationServiceDep, auth: AuthDep
):
    require_any_authority(auth, Authority.TOP_MANAGER, Authority.DOCTOR, action="modify registration")
    return await service.update(registration_id, request.model_dump(exclude_unset=True), auth)


@router.patch("/registrations/{registration_id}/status", response_model=RegistrationView)
async def change_registration_status(
    registration_id: int,
    is_active: Annotated[bool, Query(alias="isActive")],
    service: RegistrationServiceDep,
    auth: AuthDep,
):
    require_authenticated(auth)
    return await service.set_active(registration_id, is_active, auth)


@router.delete("/registrations/{registration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_registration(registration_id: int, service: RegistrationServiceDep, auth: AuthDep) -> None:
    require_any_authority(auth, Authority.TOP_MANAGER, action="delete registration")
    await service.delete(registration_id)
