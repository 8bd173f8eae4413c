"""
Cascade Coordinator

Clears inbound references to an entity before it is deleted, so the delete
does not trip referential or storage constraints. Dependents the coordinator
does not know about still make the store reject the delete; that surfaces as
a ConflictException ("delete dependents first").
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from polyclinic.core.persistence.store import StoreGuard

logger = logging.getLogger(__name__)

D = TypeVar("D")


@dataclass(frozen=True)
class CascadeRule(Generic[D]):
    """
    How to detach one kind of dependent from the entity being deleted.

    Attributes:
        name: Reference being cleared, e.g. "registration.duty_id"
        find_dependents: Loads every record referencing the entity ID
        detach: Returns the dependent with the reference cleared
        persist: Stores the detached dependents
    """

    name: str
    find_dependents: Callable[[int], Awaitable[Sequence[D]]]
    detach: Callable[[D, int], D]
    persist: Callable[[Sequence[D]], Awaitable[Any]]


@dataclass(frozen=True)
class CascadeAction:
    """What a rule did for one delete."""

    rule: str
    dependent_ids: tuple[Any, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.dependent_ids)


class CascadeCoordinator:
    """
    Runs every cascade rule, then the delete itself, through the store guard.

    Example:
        ```python
        coordinator = CascadeCoordinator(guard, [registrations_of_duty])
        await coordinator.delete(duty_id, lambda: duties.delete(duty_id),
                                 conflict_message="Delete all registrations of this duty first")
        ```
    """

    def __init__(self, guard: StoreGuard, rules: Sequence[CascadeRule[Any]] = ()):
        self._guard = guard
        self._rules = tuple(rules)

    async def before_delete(self, entity_id: int) -> list[CascadeAction]:
        """Detach and persist all dependents of `entity_id`."""
        actions = []
        for rule in self._rules:
            dependents = await self._guard.run(
                lambda rule=rule: rule.find_dependents(entity_id), action=f"load {rule.name}", target=entity_id
            )
            if not dependents:
                actions.append(CascadeAction(rule.name))
                continue

            detached = [rule.detach(dependent, entity_id) for dependent in dependents]
            await self._guard.run(
                lambda rule=rule, detached=detached: rule.persist(detached),
                action=f"clear {rule.name}",
                target=entity_id,
            )
            ids = tuple(getattr(dependent, "id", None) for dependent in detached)
            logger.info(f"Cleared {rule.name} on {len(ids)} record(s) before deleting {entity_id}: {list(ids)}")
            actions.append(CascadeAction(rule.name, ids))
        return actions

    async def delete(
        self,
        entity_id: int,
        delete: Callable[[], Awaitable[Any]],
        *,
        conflict_message: str,
    ) -> list[CascadeAction]:
        """
        Clear dependents, then delete.

        Raises:
            ConflictException: If the store still rejects the delete
            RemoteUnavailableException: If the store failed
        """
        actions = await self.before_delete(entity_id)
        await self._guard.run(delete, action="delete", target=entity_id, conflict_message=conflict_message)
        return actions
