# ============================================================================
# Tests for the StoreGuard
# ============================================================================
"""Unit tests for classification of local store failures."""

import pytest
from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError

from polyclinic.core.domain import (
    ConflictException,
    EntityNotFoundException,
    RemoteUnavailableException,
    ValidationException,
)
from polyclinic.core.infrastructure import CircuitBreaker, CircuitBreakerConfig, CircuitState
from polyclinic.core.persistence import STORE_EXCLUDED_EXCEPTIONS, StoreGuard


def integrity_error() -> IntegrityError:
    return IntegrityError("INSERT INTO clients", {}, Exception("UNIQUE constraint failed: clients.email"))


def operational_error() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestStoreGuard:
    """Tests for StoreGuard."""

    @pytest.mark.asyncio
    async def test_returns_result(self, store_guard) -> None:
        """Should pass the operation's result through."""

        async def load() -> int:
            return 5

        assert await store_guard("Client").run(load, action="get") == 5

    @pytest.mark.asyncio
    async def test_integrity_error_is_conflict(self, store_guard) -> None:
        """Should turn a constraint violation into a conflict with the given message."""

        async def save() -> None:
            raise integrity_error()

        with pytest.raises(ConflictException) as exc_info:
            await store_guard("Client").run(
                save, action="create", conflict_message="Such a client already exists: a@b.com"
            )
        assert exc_info.value.message == "Such a client already exists: a@b.com"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_no_result_is_not_found(self, store_guard) -> None:
        """Should turn a missing row into EntityNotFoundException."""

        async def load() -> None:
            raise NoResultFound()

        with pytest.raises(EntityNotFoundException, match="No client with id 3"):
            await store_guard("Client").run(load, action="get", target=3)

    @pytest.mark.asyncio
    async def test_domain_exceptions_pass_through(self, store_guard) -> None:
        """Should re-raise domain exceptions unchanged."""

        async def check() -> None:
            raise ValidationException("Email is mandatory")

        with pytest.raises(ValidationException, match="Email is mandatory"):
            await store_guard("Client").run(check, action="create")

    @pytest.mark.asyncio
    async def test_infrastructure_error_is_unavailable(self, store_guard) -> None:
        """Should report a store failure as RemoteUnavailableException."""

        async def load() -> None:
            raise operational_error()

        with pytest.raises(RemoteUnavailableException) as exc_info:
            await store_guard("Client").run(load, action="list")
        assert exc_info.value.message == "client database unavailable"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_open_breaker_is_unavailable(self) -> None:
        """Should fast-fail with RemoteUnavailableException once the store breaker opens."""
        config = CircuitBreakerConfig(
            sliding_window_size=2, minimum_calls=2, excluded_exceptions=STORE_EXCLUDED_EXCEPTIONS
        )
        guard = StoreGuard(CircuitBreaker("clients.database", config), "Client")
        calls = 0

        async def load() -> None:
            nonlocal calls
            calls += 1
            raise operational_error()

        for _ in range(2):
            with pytest.raises(RemoteUnavailableException):
                await guard.run(load, action="list")
        assert guard.breaker.state == CircuitState.OPEN

        with pytest.raises(RemoteUnavailableException):
            await guard.run(load, action="list")
        assert calls == 2

    @pytest.mark.asyncio
    async def test_conflicts_do_not_open_breaker(self) -> None:
        """Should count constraint violations as healthy store answers."""
        config = CircuitBreakerConfig(
            sliding_window_size=2, minimum_calls=2, excluded_exceptions=STORE_EXCLUDED_EXCEPTIONS
        )
        guard = StoreGuard(CircuitBreaker("clients.database", config), "Client")

        async def save() -> None:
            raise integrity_error()

        for _ in range(4):
            with pytest.raises(ConflictException):
                await guard.run(save, action="create")
        assert guard.breaker.state == CircuitState.CLOSED
