"""
Domain Layer - shared building blocks

- Entities: objects with identity
- Value Objects: immutable objects compared by value
- Exceptions: the error taxonomy every service reports through
"""

from polyclinic.core.domain.entities import Entity
from polyclinic.core.domain.exceptions import (
    AccessDeniedException,
    AuthenticationRequiredException,
    ConflictException,
    DomainException,
    EntityNotFoundException,
    RemoteUnavailableException,
    ValidationException,
)
from polyclinic.core.domain.value_objects import Address, Authority, Sex, StatusEnum, ValueObject

__all__ = [
    # Entities
    "Entity",
    # Value Objects
    "Address",
    "Authority",
    "Sex",
    "StatusEnum",
    "ValueObject",
    # Exceptions
    "AccessDeniedException",
    "AuthenticationRequiredException",
    "ConflictException",
    "DomainException",
    "EntityNotFoundException",
    "RemoteUnavailableException",
    "ValidationException",
]
