"""
Value Objects

Immutable domain primitives compared by value. They never validate on
construction: constraint checks run through the ConstraintValidator so that
every violation is reported at once.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Self


@dataclass(frozen=True)
class ValueObject:
    """Base class for all value objects."""


@dataclass(frozen=True)
class Address(ValueObject):
    """Postal address embedded in personal data."""

    country: str | None = None
    state: str | None = None
    city: str | None = None
    street: str | None = None
    house_number: int | None = None

    def get_full_address(self) -> str:
        """Get full formatted address."""
        parts = [self.street, str(self.house_number or ""), self.city, self.state, self.country]
        return ", ".join(p for p in parts if p)

    def __str__(self) -> str:
        return self.get_full_address()


class StatusEnum(str, Enum):
    """
    Base class for string enums.

    Provides common functionality for all enum value objects.
    """

    @classmethod
    def values(cls) -> list[str]:
        """Get all possible values."""
        return [e.value for e in cls]

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create from string value (case-insensitive)."""
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        raise ValueError(f"Invalid {cls.__name__}: {value}")


class Sex(StatusEnum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class Authority(StatusEnum):
    """Authorities carried by a bearer token."""

    USER = "USER"
    DOCTOR = "DOCTOR"
    TEAM_MANAGER = "TEAM_MANAGER"
    TOP_MANAGER = "TOP_MANAGER"
