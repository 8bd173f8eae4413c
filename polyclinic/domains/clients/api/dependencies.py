from typing import Annotated

from fastapi import Depends

from polyclinic.api.dependencies import ContainerDep, DbSession
from polyclinic.domains.clients.application import ClientService


def get_client_service(db: DbSession, container: ContainerDep) -> ClientService:
    """Get ClientService instance with database session."""
    return container.create_client_service(db)


ClientServiceDep = Annotated[ClientService, Depends(get_client_service)]
