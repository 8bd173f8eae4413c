"""
Client API Routes
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from polyclinic.api.dependencies import AuthDep
from polyclinic.core.domain import Authority
from polyclinic.core.security.capabilities import ensure, require_any_authority
from polyclinic.domains.clients.api.dependencies import ClientServiceDep
from polyclinic.domains.clients.api.schemas import ClientCreate, ClientPatch, ClientResponse
from polyclinic.domains.clients.domain import Client

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("", response_model=list[ClientResponse])
async def list_clients(service: ClientServiceDep, auth: AuthDep, email: str | None = None):
    """All clients (top managers), or the one with `email` (top managers and the client)."""
    if email is not None:
        ensure(auth.is_owner(email) or auth.has_authority(Authority.TOP_MANAGER), auth, "view client")
        return [await service.get_by_email(email)]
    require_any_authority(auth, Authority.TOP_MANAGER, action="list clients")
    return await service.list_clients()


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(client_id: int, service: ClientServiceDep):
    """Resolve-by-ID contract consumed by peer services."""
    return await service.get_client(client_id)


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(request: ClientCreate, service: ClientServiceDep):
    return await service.create(Client(**request.model_dump()))


@router.patch("/{client_id}", response_model=ClientResponse)
async def patch_client(client_id: int, request: ClientPatch, service: ClientServiceDep, auth: AuthDep):
    return await service.update(client_id, request.model_dump(exclude_unset=True), auth)


@router.patch("/{client_id}/status", response_model=ClientResponse)
async def change_client_status(
    client_id: int,
    is_active: Annotated[bool, Query(alias="isActive")],
    service: ClientServiceDep,
    auth: AuthDep,
):
    return await service.set_enabled(client_id, is_active, auth)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: int, service: ClientServiceDep, auth: AuthDep) -> None:
    await service.delete(client_id, auth)
