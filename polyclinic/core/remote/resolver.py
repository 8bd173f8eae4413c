"""
Remote Resolver

Best-effort lookup of foreign-owned entities for read-time enrichment.
"No data" and "an error occurred" both come back as None; only the log
tells them apart.
"""

import logging
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from polyclinic.core.remote.peer_client import PeerClient, PeerNotFoundError
from polyclinic.core.security.context import AuthContext

logger = logging.getLogger(__name__)

SnapshotT = TypeVar("SnapshotT", bound=BaseModel)


class RemoteResolver(Generic[SnapshotT]):
    """
    Resolves IDs of one resource at one peer into snapshot models.

    Never raises to its caller (cancellation aside).
    """

    def __init__(
        self,
        client: PeerClient,
        resource: str,
        snapshot_type: type[SnapshotT],
        entity_name: str | None = None,
    ):
        self.client = client
        self.resource = resource
        self.snapshot_type = snapshot_type
        self.entity_name = entity_name or resource.rstrip("s").capitalize()

    @property
    def dependency(self) -> str:
        return f"{self.client.name}/{self.resource}"

    async def resolve(self, entity_id: int | None, auth: AuthContext | None = None) -> SnapshotT | None:
        """Resolve one ID, None when absent, unreachable or malformed."""
        if entity_id is None:
            return None
        try:
            body = await self.client.fetch(self.resource, entity_id, auth=auth)
        except PeerNotFoundError:
            logger.error(f"{self.entity_name} not found: {entity_id}")
            return None
        except Exception as e:
            logger.error(f"{self.client.name} unavailable ({self.dependency}, id {entity_id}): {e}")
            return None
        return self._to_snapshot(body, entity_id)

    async def resolve_many(
        self,
        params: dict[str, Any],
        auth: AuthContext | None = None,
    ) -> list[SnapshotT] | None:
        """Resolve a filtered collection, None when the peer could not answer."""
        try:
            bodies = await self.client.search(self.resource, params, auth=auth)
        except Exception as e:
            logger.error(f"{self.client.name} unavailable ({self.dependency}, {params}): {e}")
            return None
        snapshots = [self._to_snapshot(body, body.get("id") if isinstance(body, dict) else None) for body in bodies]
        return [snapshot for snapshot in snapshots if snapshot is not None]

    def _to_snapshot(self, body: Any, entity_id: Any) -> SnapshotT | None:
        try:
            return self.snapshot_type.model_validate(body)
        except ValidationError as e:
            logger.error(
                f"{self.client.name} answered an unexpected {self.entity_name} body for id {entity_id}: "
                f"{e.error_count()} errors"
            )
            return None
