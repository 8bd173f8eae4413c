"""
Peer Service Client

Async HTTP client for the "resolve by ID" contract every service exposes:
`GET /<resource>/{id}` answers the owned entity's JSON or a 404.
All calls go through the breaker of the (service, peer) pair and carry the
caller's token and the correlation ID of the request being served.
"""

import logging
from typing import Any

import httpx

from polyclinic.core.infrastructure import CircuitBreaker
from polyclinic.core.security.context import AuthContext
from polyclinic.core.shared.logger import CORRELATION_HEADER, get_correlation_id

logger = logging.getLogger(__name__)


class PeerError(Exception):
    """Base error of a peer call."""

    def __init__(self, peer: str, message: str):
        super().__init__(message)
        self.peer = peer


class PeerNotFoundError(PeerError):
    """The peer answered 404: the entity does not exist there."""

    def __init__(self, peer: str, resource: str, entity_id: Any):
        super().__init__(peer, f"{peer}: no {resource} with id {entity_id}")
        self.resource = resource
        self.entity_id = entity_id


class PeerUnavailableError(PeerError):
    """Timeout, network error or unexpected status from the peer."""

    def __init__(self, peer: str, message: str, status_code: int | None = None):
        super().__init__(peer, message)
        self.status_code = status_code


class PeerClient:
    """
    Typed access to one peer service.

    Example:
        ```python
        client = PeerClient("clinic-service", "http://clinic:8000", breaker, timeout=5.0)
        department = await client.fetch("departments", 3, auth=ctx)
        ```
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        breaker: CircuitBreaker,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize peer client.

        Args:
            name: Peer service name used in logs and error messages
            base_url: Root URL of the peer
            breaker: Breaker shared by every caller of this peer
            timeout: Per-call timeout, shorter than the breaker window
            transport: Optional transport (tests mount httpx.MockTransport)
        """
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.breaker = breaker
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def fetch(self, resource: str, entity_id: int, auth: AuthContext | None = None) -> dict[str, Any]:
        """
        Fetch one entity by ID.

        Raises:
            PeerNotFoundError: The peer answered 404
            PeerUnavailableError: Any other failure of the call
            CircuitOpenError: The breaker fast-failed the call
        """
        path = f"/{resource}/{entity_id}"

        async def request() -> dict[str, Any]:
            response = await self._get(path, None, auth)
            if response.status_code == 404:
                raise PeerNotFoundError(self.name, resource, entity_id)
            body = self._json(response, path)
            if not isinstance(body, dict):
                raise PeerUnavailableError(self.name, f"{self.name}: unexpected body for {path}")
            return body

        return await self.breaker.execute(request)

    async def search(
        self,
        resource: str,
        params: dict[str, Any],
        auth: AuthContext | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch a filtered collection, e.g. doctors by specialty."""
        path = f"/{resource}"

        async def request() -> list[dict[str, Any]]:
            response = await self._get(path, params, auth)
            body = self._json(response, path)
            if not isinstance(body, list):
                raise PeerUnavailableError(self.name, f"{self.name}: unexpected body for {path}")
            return body

        return await self.breaker.execute(request)

    async def _get(self, path: str, params: dict[str, Any] | None, auth: AuthContext | None) -> httpx.Response:
        client = await self._get_client()
        headers = auth.forwarded_headers() if auth else {}
        correlation_id = get_correlation_id()
        if correlation_id:
            headers[CORRELATION_HEADER] = correlation_id
        try:
            return await client.get(path, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise PeerUnavailableError(self.name, f"{self.name}: timeout calling {path}") from e
        except httpx.RequestError as e:
            raise PeerUnavailableError(self.name, f"{self.name}: request error calling {path}: {e}") from e

    def _json(self, response: httpx.Response, path: str) -> Any:
        if response.status_code != 200:
            raise PeerUnavailableError(
                self.name,
                f"{self.name}: unexpected status {response.status_code} for {path}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise PeerUnavailableError(self.name, f"{self.name}: invalid JSON for {path}") from e
