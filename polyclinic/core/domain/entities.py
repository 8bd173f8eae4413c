"""
Base Entity Classes

Owned entities carry an opaque numeric identity assigned by the store on
creation. Foreign references are plain IDs, never objects.
"""

from abc import ABC
from dataclasses import dataclass, field
from typing import Generic, TypeVar

TId = TypeVar("TId")


@dataclass(kw_only=True)
class Entity(ABC, Generic[TId]):
    """
    Base class for all owned entities.

    Subclasses are dataclasses compared field by field, so a merged copy can
    be checked against the stored original.

    Example:
        ```python
        @dataclass(kw_only=True)
        class Duty(Entity[int]):
            name: str | None = None
            price: Decimal | None = None
        ```
    """

    id: TId | None = field(default=None)

    def is_new(self) -> bool:
        """Check if entity is new (not yet persisted)."""
        return self.id is None
