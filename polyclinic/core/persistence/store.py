"""
Local Store Guard

Runs repository calls through the breaker of the service's own database and
classifies what comes out before it leaves the service boundary:

- constraint violation  -> ConflictException
- absence               -> EntityNotFoundException
- open breaker, anything else -> RemoteUnavailableException

Domain exceptions raised inside the operation pass through unchanged.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, NoResultFound

from polyclinic.core.domain import (
    ConflictException,
    DomainException,
    EntityNotFoundException,
    RemoteUnavailableException,
)
from polyclinic.core.infrastructure import CircuitBreaker, CircuitOpenError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Outcomes that prove the store answered.
STORE_EXCLUDED_EXCEPTIONS: tuple[type[BaseException], ...] = (DomainException, IntegrityError, NoResultFound)


class StoreGuard:
    """Gate and classifier for one service's local store."""

    def __init__(self, breaker: CircuitBreaker, resource: str):
        """
        Args:
            breaker: Breaker of the local database
            resource: Label used in messages, e.g. "Registration"
        """
        self.breaker = breaker
        self.resource = resource

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        action: str,
        target: Any = None,
        conflict_message: str | None = None,
    ) -> T:
        """
        Execute a store operation and classify its failure.

        Args:
            operation: Zero-argument coroutine function touching the store
            action: Operation name for the log, e.g. "delete"
            target: Target ID for the log and NotFound message
            conflict_message: Message of the Conflict raised on a constraint violation
        """
        try:
            return await self.breaker.execute(operation)
        except DomainException:
            raise
        except IntegrityError as e:
            message = conflict_message or f"{self.resource} violates a uniqueness or reference constraint"
            logger.warning(f"{self.resource} {action} rejected by store constraints (id {target}): {e.orig}")
            raise ConflictException(message, details={"action": action, "target": str(target)}) from e
        except NoResultFound as e:
            logger.info(f"{self.resource} {action}: no row for id {target}")
            raise EntityNotFoundException(self.resource, target) from e
        except CircuitOpenError as e:
            logger.error(f"{self.resource} {action} fast-failed (id {target}): {e}")
            raise RemoteUnavailableException(
                f"{self.resource.lower()} database unavailable", dependency=self.breaker.name
            ) from e
        except Exception as e:
            logger.error(f"{self.resource} {action} failed (id {target}): {e}", exc_info=True)
            raise RemoteUnavailableException(
                f"{self.resource.lower()} database unavailable", dependency=self.breaker.name
            ) from e
