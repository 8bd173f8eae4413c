"""
Shared pytest fixtures for all tests.

Database fixtures run on in-memory SQLite (aiosqlite); peer services are
simulated with httpx.MockTransport.
"""

import os
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"

from polyclinic.config.settings import Settings  # noqa: E402
from polyclinic.core.domain import Authority  # noqa: E402
from polyclinic.core.infrastructure import CircuitBreaker, CircuitBreakerConfig  # noqa: E402
from polyclinic.core.persistence import STORE_EXCLUDED_EXCEPTIONS, StoreGuard  # noqa: E402
from polyclinic.core.remote import PeerClient, PeerNotFoundError  # noqa: E402
from polyclinic.core.security.context import AuthContext  # noqa: E402
from polyclinic.database import create_database_engine, create_session_factory, init_models  # noqa: E402

TEST_SECRET = "test-secret"


# ============================================================================
# SETTINGS
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings for an in-memory database, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        JWT_SECRET_KEY=TEST_SECRET,
        CLIENT_SERVICE_URL="http://client-service",
        CLINIC_SERVICE_URL="http://clinic-service",
        EMPLOYEE_SERVICE_URL="http://employee-service",
        REGISTRATION_SERVICE_URL="http://registration-service",
    )


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def async_engine(settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Engine with every table created."""
    engine = create_database_engine(settings)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for one test."""
    async with create_session_factory(async_engine)() as session:
        yield session


@pytest.fixture
def store_guard() -> Callable[[str], StoreGuard]:
    """Factory of store guards with a fresh breaker each."""

    def make(resource: str) -> StoreGuard:
        config = CircuitBreakerConfig(excluded_exceptions=STORE_EXCLUDED_EXCEPTIONS)
        return StoreGuard(CircuitBreaker(f"test.{resource.lower()}.database", config), resource)

    return make


# ============================================================================
# SECURITY FIXTURES
# ============================================================================


def make_token(email: str, *authorities: Authority) -> str:
    return jwt.encode({"sub": email, "authorities": [a.value for a in authorities]}, TEST_SECRET, algorithm="HS256")


@pytest.fixture
def top_manager() -> AuthContext:
    return AuthContext(email="boss@clinic.com", authorities=frozenset({Authority.TOP_MANAGER}), token="boss-token")


@pytest.fixture
def patient() -> AuthContext:
    return AuthContext(email="a@b.com", authorities=frozenset({Authority.USER}), token="patient-token")


# ============================================================================
# PEER FIXTURES
# ============================================================================


class FakePeer:
    """
    Routes GET requests of an httpx.MockTransport to canned JSON.

    `routes` maps a path ("/doctors/7") or a collection path ("/doctors") to a
    body, an int status code, or an exception to raise.
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get(request.url.path, 404)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, int):
            return httpx.Response(answer, json={"status": answer})
        return httpx.Response(200, json=answer)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_peer() -> FakePeer:
    return FakePeer()


@pytest.fixture
def peer_client(fake_peer: FakePeer) -> Callable[..., PeerClient]:
    """Factory of gated peer clients served by `fake_peer`."""

    def make(name: str = "employee-service", config: CircuitBreakerConfig | None = None) -> PeerClient:
        config = config or CircuitBreakerConfig(excluded_exceptions=(PeerNotFoundError,))
        breaker = CircuitBreaker(f"test.{name}", config)
        return PeerClient(name, f"http://{name}", breaker, timeout=1.0, transport=fake_peer.transport)

    return make
