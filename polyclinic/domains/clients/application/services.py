"""
Client Service

Application service of the client service: validated creation, partial
updates, status toggling and deletion of clients.
"""

import logging
from collections.abc import Mapping
from typing import Any

from polyclinic.core.domain import EntityNotFoundException
from polyclinic.core.persistence import MergeUpdater, StoreGuard, merge
from polyclinic.core.security.capabilities import can_modify_client, ensure
from polyclinic.core.security.context import AuthContext
from polyclinic.core.security.passwords import hash_password
from polyclinic.domains.clients.application.ports import IClientRepository
from polyclinic.domains.clients.domain import Client, client_validator

logger = logging.getLogger(__name__)


class ClientService:
    """
    Use cases over clients.

    Dependency Inversion: depends on the repository protocol and the store
    guard, not on SQLAlchemy.
    """

    def __init__(self, repository: IClientRepository, guard: StoreGuard):
        self._repository = repository
        self._guard = guard
        self._updater = MergeUpdater(client_validator)

    async def list_clients(self) -> list[Client]:
        return await self._guard.run(self._repository.find_all, action="list")

    async def get_client(self, client_id: int) -> Client:
        client = await self._guard.run(lambda: self._repository.find_by_id(client_id), action="get", target=client_id)
        if client is None:
            raise EntityNotFoundException("Client", client_id)
        return client

    async def get_by_email(self, email: str) -> Client:
        client = await self._guard.run(lambda: self._repository.find_by_email(email), action="get", target=email)
        if client is None:
            raise EntityNotFoundException("Client", email, message=f"No client with email {email}")
        return client

    async def create(self, client: Client) -> Client:
        """
        Validate and store a new client.

        Raises:
            ValidationException: Aggregated constraint violations
            ConflictException: Email already taken
        """
        client_validator.check(client)
        prepared = merge(client, {"password": hash_password(client.password or "")})
        saved = await self._persist(prepared, action="create")
        logger.info(f"Client created: {saved.id}")
        return saved

    async def update(self, client_id: int, patch: Mapping[str, Any], auth: AuthContext) -> Client:
        """Apply a partial update; a new password is re-hashed after validation."""
        stored = await self.get_client(client_id)
        ensure(can_modify_client(auth, stored.email), auth, "modify client")

        updated = self._updater.apply(stored, patch)
        if patch.get("password"):
            updated = merge(updated, {"password": hash_password(patch["password"])})
        return await self._persist(updated, action="update")

    async def set_enabled(self, client_id: int, enabled: bool, auth: AuthContext) -> Client:
        stored = await self.get_client(client_id)
        ensure(can_modify_client(auth, stored.email), auth, "change client status")
        return await self._persist(self._updater.apply(stored, {"enabled": enabled}), action="status")

    async def delete(self, client_id: int, auth: AuthContext) -> None:
        stored = await self.get_client(client_id)
        ensure(can_modify_client(auth, stored.email), auth, "delete client")

        async def delete() -> None:
            await self._repository.delete(client_id)
            await self._repository.commit()

        await self._guard.run(delete, action="delete", target=client_id)
        logger.info(f"Client deleted: {client_id}")

    async def _persist(self, client: Client, action: str) -> Client:
        async def save() -> Client:
            saved = await self._repository.save(client)
            await self._repository.commit()
            return saved

        return await self._guard.run(
            save,
            action=action,
            target=client.id,
            conflict_message=f"Such a client already exists: {client.email}",
        )
