"""
Client Repository Interface

Protocol definition for client data access.
"""

from typing import Protocol, runtime_checkable

from polyclinic.domains.clients.domain import Client


@runtime_checkable
class IClientRepository(Protocol):
    """
    Interface for client repository.

    Writes are flushed, not committed; `commit` ends the unit of work.
    """

    async def find_all(self) -> list[Client]:
        """Get every client."""
        ...

    async def find_by_id(self, client_id: int) -> Client | None:
        """Find client by ID."""
        ...

    async def find_by_email(self, email: str) -> Client | None:
        """Find client by email."""
        ...

    async def save(self, client: Client) -> Client:
        """Insert or update a client and return it with its ID."""
        ...

    async def delete(self, client_id: int) -> bool:
        """Delete a client, False when it did not exist."""
        ...

    async def commit(self) -> None:
        """Commit pending writes."""
        ...


__all__ = ["IClientRepository"]
