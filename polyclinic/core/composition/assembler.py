"""
Composition Assembler

Builds the externally visible view of an owned entity: its local fields plus
snapshots of its foreign references, resolved concurrently. A reference that
cannot be resolved is left as None; the composition itself never fails
because a peer is degraded.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from polyclinic.core.remote.resolver import RemoteResolver
from polyclinic.core.security.context import AuthContext

logger = logging.getLogger(__name__)

O = TypeVar("O")
V = TypeVar("V")

Loader = Callable[[Any, AuthContext | None], Awaitable[Any]]


@dataclass(frozen=True)
class ForeignField:
    """One foreign field of a composed view and how to load it."""

    name: str
    load: Loader

    @classmethod
    def by_id(cls, name: str, resolver: RemoteResolver[Any], reference: Callable[[Any], int | None]) -> "ForeignField":
        """Field resolved from an ID held by the owned entity."""

        async def load(owned: Any, auth: AuthContext | None) -> Any:
            return await resolver.resolve(reference(owned), auth=auth)

        return cls(name, load)

    @classmethod
    def by_search(
        cls,
        name: str,
        resolver: RemoteResolver[Any],
        params: Callable[[Any], dict[str, Any] | None],
    ) -> "ForeignField":
        """Field resolved by a filtered lookup at the peer, e.g. doctors of a specialty."""

        async def load(owned: Any, auth: AuthContext | None) -> Any:
            query = params(owned)
            if query is None:
                return None
            return await resolver.resolve_many(query, auth=auth)

        return cls(name, load)


class CompositionAssembler(Generic[O, V]):
    """
    Example:
        ```python
        assembler = CompositionAssembler(
            [ForeignField.by_id("doctor", doctors, lambda r: r.doctor_id)],
            build=RegistrationView.compose,
        )
        view = await assembler.compose(registration, auth=ctx)
        ```
    """

    def __init__(self, fields: Sequence[ForeignField], build: Callable[[O, dict[str, Any]], V]):
        self._fields = tuple(fields)
        self._build = build

    async def resolve(self, owned: O, auth: AuthContext | None = None) -> dict[str, Any]:
        """Resolve every foreign field; failures become None."""
        results = await asyncio.gather(
            *(foreign.load(owned, auth) for foreign in self._fields),
            return_exceptions=True,
        )
        resolved: dict[str, Any] = {}
        for foreign, result in zip(self._fields, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.error(f"Could not resolve '{foreign.name}' of {type(owned).__name__}: {result}")
                result = None
            resolved[foreign.name] = result
        return resolved

    async def compose(self, owned: O, auth: AuthContext | None = None) -> V:
        """Build the composed view of one owned entity."""
        return self._build(owned, await self.resolve(owned, auth))

    async def compose_many(self, owned: Sequence[O], auth: AuthContext | None = None) -> list[V]:
        """Compose a collection; each entity resolves its own references."""
        return list(await asyncio.gather(*(self.compose(item, auth) for item in owned)))
