"""
Domain Exceptions

Every failure that leaves a service boundary is one of these classes.
The API layer maps them to status codes; nothing else should reach a client.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate rule violations.
    """

    status_code: int = 500

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "VALIDATION_ERROR")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """
    Raised when an entity fails its constraints or a referenced foreign ID
    is confirmed absent. Client-fixable.
    """

    status_code = 400

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class ConflictException(DomainException):
    """
    Raised when a write collides with a uniqueness constraint or a delete is
    blocked by dependents. Client-fixable.
    """

    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "CONFLICT", details)


class EntityNotFoundException(DomainException):
    """Raised when a requested or referenced entity does not exist."""

    status_code = 404

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"No {entity_type.lower()} with id {entity_id}"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class RemoteUnavailableException(DomainException):
    """
    Raised when a breaker is open or a store/peer call failed for
    infrastructure reasons. Not fixable by changing the request.
    """

    status_code = 500

    def __init__(self, message: str, dependency: str | None = None):
        details = {"dependency": dependency} if dependency else {}
        super().__init__(message, "REMOTE_UNAVAILABLE", details)
        self.dependency = dependency


class AuthenticationRequiredException(DomainException):
    """Raised when a capability needs an authenticated caller."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "AUTHENTICATION_REQUIRED")


class AccessDeniedException(DomainException):
    """Raised when the caller lacks the capability for an action."""

    status_code = 403

    def __init__(self, message: str = "Access denied", action: str | None = None):
        details = {"action": action} if action else {}
        super().__init__(message, "ACCESS_DENIED", details)
        self.action = action
