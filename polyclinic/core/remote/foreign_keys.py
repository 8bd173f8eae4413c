"""
Foreign Key Checker

Confirms that a foreign ID embedded in a write exists at its owning service.
The outcome separates client-fixable problems (ValidationException) from
infrastructure ones (RemoteUnavailableException).
"""

import logging
from collections.abc import Iterable

from polyclinic.core.domain import RemoteUnavailableException, ValidationException
from polyclinic.core.remote.peer_client import PeerClient, PeerNotFoundError
from polyclinic.core.security.context import AuthContext

logger = logging.getLogger(__name__)


class ForeignKeyChecker:
    """Existence checks for one resource at one peer."""

    def __init__(self, client: PeerClient, resource: str, entity_name: str):
        """
        Args:
            client: Gated client of the owning service
            resource: Path segment of the resource, e.g. "departments"
            entity_name: Label used in messages, e.g. "Department"
        """
        self.client = client
        self.resource = resource
        self.entity_name = entity_name

    @property
    def field(self) -> str:
        return f"{self.entity_name.lower().replace(' ', '_')}_id"

    async def exists(self, entity_id: int, auth: AuthContext | None = None) -> bool:
        """
        Check existence at the owning service.

        Raises:
            RemoteUnavailableException: The owner could not be asked
        """
        try:
            await self.client.fetch(self.resource, entity_id, auth=auth)
        except PeerNotFoundError:
            return False
        except Exception as e:
            logger.error(f"Could not verify {self.entity_name.lower()} {entity_id} at {self.client.name}: {e}")
            raise RemoteUnavailableException(
                f"{self.client.name} unavailable", dependency=self.client.name
            ) from e
        return True

    async def require(self, entity_id: int | None, auth: AuthContext | None = None) -> None:
        """
        Accept the reference or raise.

        Raises:
            ValidationException: ID missing or unknown at the owner
            RemoteUnavailableException: The owner could not be asked
        """
        if entity_id is None:
            raise ValidationException(f"{self.entity_name} ID is mandatory", field=self.field)
        if not await self.exists(entity_id, auth=auth):
            logger.info(f"Rejected write: no {self.entity_name.lower()} with id {entity_id}")
            raise ValidationException(
                f"no {self.entity_name.lower()} with id {entity_id}", field=self.field
            )

    async def require_all(self, entity_ids: Iterable[int], auth: AuthContext | None = None) -> None:
        """Check every ID of a collection reference, first unknown ID wins."""
        for entity_id in entity_ids:
            await self.require(entity_id, auth=auth)
