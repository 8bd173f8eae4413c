"""
Authentication Context

The caller's identity travels explicitly through the call chain as an
AuthContext value built once per request from the bearer token.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from jose import JWTError, jwt

from polyclinic.core.domain import Authority, AuthenticationRequiredException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Identity and authorities of the caller of one request."""

    email: str | None = None
    authorities: frozenset[Authority] = field(default_factory=frozenset)
    token: str | None = None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.email is not None

    def has_authority(self, *authorities: Authority) -> bool:
        """Check whether the caller holds any of the given authorities."""
        return any(authority in self.authorities for authority in authorities)

    def is_owner(self, email: str | None) -> bool:
        return self.is_authenticated and email is not None and self.email == email

    def forwarded_headers(self) -> dict[str, str]:
        """Headers that carry this identity to a peer service."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


class TokenDecoder:
    """Verifies bearer tokens and turns their claims into an AuthContext."""

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self._secret_key = secret_key
        self._algorithm = algorithm

    def decode(self, token: str) -> AuthContext:
        """
        Decode a bearer token.

        Raises:
            AuthenticationRequiredException: If the signature or claims are invalid
        """
        try:
            payload: dict[str, Any] = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as e:
            logger.warning(f"Rejected bearer token: {e}")
            raise AuthenticationRequiredException("Invalid token") from e

        email = payload.get("sub")
        if not email:
            raise AuthenticationRequiredException("Invalid token")

        authorities = set()
        for raw in payload.get("authorities", []):
            try:
                authorities.add(Authority.from_string(raw))
            except ValueError:
                logger.debug(f"Ignoring unknown authority '{raw}' for {email}")
        return AuthContext(email=email, authorities=frozenset(authorities), token=token)

    def from_header(self, authorization: str | None) -> AuthContext:
        """Build the context from a raw Authorization header value."""
        if not authorization:
            return AuthContext.anonymous()
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise AuthenticationRequiredException("Unsupported authorization scheme")
        return self.decode(token.strip())
