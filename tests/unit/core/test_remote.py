# ============================================================================
# Tests for PeerClient, RemoteResolver and ForeignKeyChecker
# ============================================================================
"""
Unit tests for calls to peer services.

Peers are served by httpx.MockTransport through the `fake_peer` fixture.
"""

import httpx
import pytest

from polyclinic.core.composition.snapshots import DoctorSnapshot
from polyclinic.core.domain import RemoteUnavailableException, ValidationException
from polyclinic.core.infrastructure import CircuitBreakerConfig, CircuitOpenError, CircuitState
from polyclinic.core.remote import (
    ForeignKeyChecker,
    PeerNotFoundError,
    PeerUnavailableError,
    RemoteResolver,
)
from polyclinic.core.shared.logger import reset_correlation_id, set_correlation_id

DOCTOR = {
    "id": 7,
    "email": "house@clinic.com",
    "specialty": "diagnostician",
    "departmentId": 1,
    "personalData": {"name": "Gregory House", "phone": "+380501112233", "sex": "MALE"},
}


def fragile() -> CircuitBreakerConfig:
    return CircuitBreakerConfig(
        sliding_window_size=2, minimum_calls=2, excluded_exceptions=(PeerNotFoundError,)
    )


# ============================================================================
# PeerClient
# ============================================================================


class TestPeerClient:
    """Tests for PeerClient."""

    @pytest.mark.asyncio
    async def test_fetch_returns_body(self, fake_peer, peer_client, top_manager) -> None:
        """Should GET /<resource>/<id> and forward the caller's token."""
        fake_peer.routes["/doctors/7"] = DOCTOR
        client = peer_client()

        assert await client.fetch("doctors", 7, auth=top_manager) == DOCTOR
        assert fake_peer.requests[0].headers["Authorization"] == "Bearer boss-token"
        await client.close()

    @pytest.mark.asyncio
    async def test_forwards_correlation_id(self, fake_peer, peer_client) -> None:
        """Should carry the correlation ID of the request being served."""
        fake_peer.routes["/doctors/7"] = DOCTOR
        client = peer_client()

        token = set_correlation_id("c0ffee42")
        try:
            await client.fetch("doctors", 7)
        finally:
            reset_correlation_id(token)
        await client.fetch("doctors", 7)

        assert fake_peer.requests[0].headers["X-Correlation-ID"] == "c0ffee42"
        assert "X-Correlation-ID" not in fake_peer.requests[1].headers

    @pytest.mark.asyncio
    async def test_fetch_404_is_not_found(self, peer_client) -> None:
        """Should raise PeerNotFoundError for a 404."""
        with pytest.raises(PeerNotFoundError):
            await peer_client().fetch("doctors", 8)

    @pytest.mark.asyncio
    async def test_fetch_500_is_unavailable(self, fake_peer, peer_client) -> None:
        """Should raise PeerUnavailableError with the status for other statuses."""
        fake_peer.routes["/doctors/7"] = 500
        with pytest.raises(PeerUnavailableError) as exc_info:
            await peer_client().fetch("doctors", 7)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_network_error_is_unavailable(self, fake_peer, peer_client) -> None:
        """Should wrap transport errors."""
        fake_peer.routes["/doctors/7"] = httpx.ConnectError("connection refused")
        with pytest.raises(PeerUnavailableError, match="request error"):
            await peer_client().fetch("doctors", 7)

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self, fake_peer, peer_client) -> None:
        """Should report a peer that does not answer in time as unavailable."""
        fake_peer.routes["/doctors/7"] = httpx.ReadTimeout("slow")
        with pytest.raises(PeerUnavailableError, match="timeout calling /doctors/7"):
            await peer_client().fetch("doctors", 7)

    @pytest.mark.asyncio
    async def test_search_passes_params(self, fake_peer, peer_client) -> None:
        """Should GET the collection with query parameters."""
        fake_peer.routes["/doctors"] = [DOCTOR]
        assert await peer_client().search("doctors", {"specialty": "diagnostician"}) == [DOCTOR]
        assert fake_peer.requests[0].url.params["specialty"] == "diagnostician"

    @pytest.mark.asyncio
    async def test_not_found_keeps_breaker_closed(self, peer_client) -> None:
        """Should count 404 answers as healthy."""
        client = peer_client(config=fragile())
        for _ in range(3):
            with pytest.raises(PeerNotFoundError):
                await client.fetch("doctors", 8)
        assert client.breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_failures_open_breaker(self, fake_peer, peer_client) -> None:
        """Should stop calling a failing peer once the breaker opens."""
        fake_peer.routes["/doctors/7"] = 503
        client = peer_client(config=fragile())
        for _ in range(2):
            with pytest.raises(PeerUnavailableError):
                await client.fetch("doctors", 7)

        with pytest.raises(CircuitOpenError):
            await client.fetch("doctors", 7)
        assert len(fake_peer.requests) == 2


# ============================================================================
# RemoteResolver
# ============================================================================


class TestRemoteResolver:
    """Tests for RemoteResolver."""

    @pytest.mark.asyncio
    async def test_resolves_snapshot(self, fake_peer, peer_client) -> None:
        """Should parse the peer's camelCase JSON into a snapshot."""
        fake_peer.routes["/doctors/7"] = DOCTOR
        resolver = RemoteResolver(peer_client(), "doctors", DoctorSnapshot, "Doctor")

        doctor = await resolver.resolve(7)

        assert doctor is not None
        assert doctor.specialty == "diagnostician"
        assert doctor.department_id == 1
        assert doctor.personal_data.name == "Gregory House"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "answer",
        [404, 500, httpx.ConnectError("connection refused"), httpx.ReadTimeout("slow"), {"email": "x"}],
    )
    async def test_failures_resolve_to_none(self, fake_peer, peer_client, answer) -> None:
        """Should return None for absence, errors and malformed bodies alike."""
        fake_peer.routes["/doctors/7"] = answer
        resolver = RemoteResolver(peer_client(), "doctors", DoctorSnapshot, "Doctor")
        assert await resolver.resolve(7) is None

    @pytest.mark.asyncio
    async def test_none_id_skips_call(self, fake_peer, peer_client) -> None:
        """Should not call the peer for a missing reference."""
        resolver = RemoteResolver(peer_client(), "doctors", DoctorSnapshot)
        assert await resolver.resolve(None) is None
        assert fake_peer.requests == []

    @pytest.mark.asyncio
    async def test_resolve_many(self, fake_peer, peer_client) -> None:
        """Should resolve a filtered collection, None when the peer fails."""
        resolver = RemoteResolver(peer_client(), "doctors", DoctorSnapshot)
        fake_peer.routes["/doctors"] = [DOCTOR, {"email": "no-id@clinic.com"}]
        doctors = await resolver.resolve_many({"specialty": "diagnostician"})
        assert [d.id for d in doctors] == [7]

        fake_peer.routes["/doctors"] = 500
        assert await resolver.resolve_many({"specialty": "diagnostician"}) is None

    @pytest.mark.asyncio
    async def test_resolve_many_skips_non_objects(self, fake_peer, peer_client) -> None:
        """Should drop list items that are not JSON objects instead of raising."""
        fake_peer.routes["/doctors"] = [1, "x", DOCTOR]
        resolver = RemoteResolver(peer_client(), "doctors", DoctorSnapshot)

        doctors = await resolver.resolve_many({"specialty": "diagnostician"})

        assert [d.id for d in doctors] == [7]


# ============================================================================
# ForeignKeyChecker
# ============================================================================


class TestForeignKeyChecker:
    """Tests for ForeignKeyChecker."""

    @pytest.mark.asyncio
    async def test_existing_reference_accepted(self, fake_peer, peer_client) -> None:
        """Should accept an ID the owner knows."""
        fake_peer.routes["/departments/5"] = {"id": 5}
        checker = ForeignKeyChecker(peer_client("clinic-service"), "departments", "Department")
        await checker.require(5)
        assert await checker.exists(5)

    @pytest.mark.asyncio
    async def test_unknown_reference_is_validation_error(self, peer_client) -> None:
        """Should reject an ID the owner answers 404 for."""
        checker = ForeignKeyChecker(peer_client("clinic-service"), "departments", "Department")
        with pytest.raises(ValidationException) as exc_info:
            await checker.require(5)
        assert exc_info.value.message == "no department with id 5"
        assert exc_info.value.field == "department_id"

    @pytest.mark.asyncio
    async def test_missing_reference_is_validation_error(self, fake_peer, peer_client) -> None:
        """Should reject a missing ID without calling the owner."""
        checker = ForeignKeyChecker(peer_client("clinic-service"), "departments", "Department")
        with pytest.raises(ValidationException, match="Department ID is mandatory"):
            await checker.require(None)
        assert fake_peer.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answer", [500, httpx.ConnectError("connection refused"), httpx.ReadTimeout("slow")])
    async def test_unreachable_owner_is_unavailable(self, fake_peer, peer_client, answer) -> None:
        """Should not mistake an owner failure for an unknown ID."""
        fake_peer.routes["/departments/5"] = answer
        checker = ForeignKeyChecker(peer_client("clinic-service"), "departments", "Department")
        with pytest.raises(RemoteUnavailableException, match="clinic-service unavailable"):
            await checker.require(5)

    @pytest.mark.asyncio
    async def test_open_breaker_is_unavailable(self, fake_peer, peer_client) -> None:
        """Should report a fast-failed check as unavailable."""
        fake_peer.routes["/departments/5"] = 500
        checker = ForeignKeyChecker(peer_client("clinic-service", fragile()), "departments", "Department")
        for _ in range(3):
            with pytest.raises(RemoteUnavailableException):
                await checker.require(5)
        assert len(fake_peer.requests) == 2

    @pytest.mark.asyncio
    async def test_require_all_reports_first_unknown(self, fake_peer, peer_client) -> None:
        """Should check each ID of a collection reference."""
        fake_peer.routes["/doctors/1"] = {"id": 1}
        checker = ForeignKeyChecker(peer_client(), "doctors", "Doctor")
        with pytest.raises(ValidationException, match="no doctor with id 2"):
            await checker.require_all([1, 2])
