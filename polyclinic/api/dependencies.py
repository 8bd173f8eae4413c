"""
Shared API Dependencies

Session, container and caller identity for every service router.
"""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from polyclinic.core.container import ServiceContainer
from polyclinic.core.security.context import AuthContext
from polyclinic.database import get_async_db

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_async_db)]


def get_container(request: Request) -> ServiceContainer:
    """Container built by the app factory for this process."""
    return request.app.state.container


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]


def get_auth_context(
    container: ContainerDep,
    authorization: Annotated[str | None, Header()] = None,
) -> AuthContext:
    """Decode the bearer token once per request; anonymous when absent."""
    return container.token_decoder.from_header(authorization)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]
