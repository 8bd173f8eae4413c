"""
Result API Routes

A result is read and written by its client, its doctor and top managers.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from polyclinic.api.dependencies import AuthDep
from polyclinic.core.security.capabilities import require_authenticated
from polyclinic.domains.results.api.dependencies import ResultServiceDep
from polyclinic.domains.results.api.schemas import ResultRequest
from polyclinic.domains.results.application import ResultView
from polyclinic.domains.results.domain import Result

router = APIRouter(prefix="/results", tags=["Results"])


@router.get("", response_model=list[ResultView])
async def list_results(
    service: ResultServiceDep,
    auth: AuthDep,
    doctor_id: Annotated[int | None, Query(alias="doctorId")] = None,
    client_id: Annotated[int | None, Query(alias="clientId")] = None,
):
    require_authenticated(auth)
    return await service.list_results(auth, doctor_id=doctor_id, client_id=client_id)


@router.get("/{result_id}", response_model=ResultView)
async def get_result(result_id: int, service: ResultServiceDep, auth: AuthDep):
    return await service.get_view(result_id, auth)


@router.post("", response_model=ResultView, status_code=status.HTTP_201_CREATED)
async def create_result(request: ResultRequest, service: ResultServiceDep, auth: AuthDep):
    require_authenticated(auth)
    return await service.create(Result(**request.model_dump()), auth)


@router.patch("/{result_id}", response_model=ResultView)
async def patch_result(result_id: int, request: ResultRequest, service: ResultServiceDep, auth: AuthDep):
    require_authenticated(auth)
    return await service.update(result_id, request.model_dump(exclude_unset=True), auth)


@router.delete("/{result_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_result(result_id: int, service: ResultServiceDep, auth: AuthDep) -> None:
    require_authenticated(auth)
    await service.delete(result_id, auth)
