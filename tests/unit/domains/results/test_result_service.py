# ============================================================================
# Tests for ResultService
# ============================================================================
"""
Unit tests for results, whose duty, doctor and client all live elsewhere.

The registration, employee and client services are simulated by `fake_peer`.
"""

import pytest

from polyclinic.core.container import ServiceContainer
from polyclinic.core.domain import (
    AccessDeniedException,
    Authority,
    EntityNotFoundException,
    RemoteUnavailableException,
    ValidationException,
)
from polyclinic.core.security.context import AuthContext
from polyclinic.domains.results.application import ResultService
from polyclinic.domains.results.domain import Result

HOUSE = AuthContext(email="house@clinic.com", authorities=frozenset({Authority.DOCTOR}))
WILSON = AuthContext(email="wilson@clinic.com", authorities=frozenset({Authority.DOCTOR}))

DUTY = {"id": 2, "name": "Blood test", "description": "CBC", "neededSpecialty": "hematologist", "price": "10.00"}
DOCTOR = {"id": 7, "email": "house@clinic.com", "personalData": {"name": "Gregory House"}}
CLIENT = {"id": 3, "email": "a@b.com", "name": "Ann"}


@pytest.fixture
def service(settings, fake_peer, db_session) -> ResultService:
    fake_peer.routes.update({"/duties/2": DUTY, "/doctors/7": DOCTOR, "/clients/3": CLIENT})
    return ServiceContainer(settings, transport=fake_peer.transport).create_result_service(db_session)


def blood_test(**overrides) -> Result:
    values = dict(data="Hemoglobin 140 g/L", duty_id=2, doctor_id=7, client_id=3)
    values.update(overrides)
    return Result(**values)


class TestResultCreate:
    """Tests for result creation."""

    @pytest.mark.asyncio
    async def test_creates_composed_result(self, service: ResultService, top_manager: AuthContext) -> None:
        """Should store the result and compose its references."""
        view = await service.create(blood_test(), top_manager)

        assert view.id is not None
        assert view.duty.name == "Blood test"
        assert view.doctor.personal_data.name == "Gregory House"
        assert view.client.name == "Ann"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"duty_id": 4}, "no duty with id 4"),
            ({"doctor_id": 8}, "no doctor with id 8"),
            ({"client_id": 5}, "no client with id 5"),
            ({"client_id": None}, "Client ID is mandatory"),
        ],
    )
    async def test_unknown_reference_rejected(
        self, service: ResultService, top_manager: AuthContext, overrides, message
    ) -> None:
        """Should reject each reference its owner does not know."""
        with pytest.raises(ValidationException, match=message):
            await service.create(blood_test(**overrides), top_manager)
        assert await service.list_results(top_manager) == []

    @pytest.mark.asyncio
    async def test_data_is_mandatory(self, service: ResultService, fake_peer, top_manager: AuthContext) -> None:
        """Should validate locally before asking any peer."""
        with pytest.raises(ValidationException, match="data is mandatory"):
            await service.create(blood_test(data=" "), top_manager)
        assert fake_peer.requests == []

    @pytest.mark.asyncio
    async def test_registration_service_down(
        self, service: ResultService, fake_peer, top_manager: AuthContext
    ) -> None:
        """Should report an unreachable duty owner as unavailable."""
        fake_peer.routes["/duties/2"] = 500
        with pytest.raises(RemoteUnavailableException, match="registration-service unavailable"):
            await service.create(blood_test(), top_manager)


class TestResultReadAndUpdate:
    """Tests for reading, updating and deleting results."""

    @pytest.mark.asyncio
    async def test_visibility(self, service: ResultService, top_manager: AuthContext, patient: AuthContext) -> None:
        """Should show a result to its client and doctor only."""
        created = await service.create(blood_test(), top_manager)
        doctor = AuthContext(email="house@clinic.com", authorities=frozenset({Authority.DOCTOR}))
        colleague = AuthContext(email="wilson@clinic.com", authorities=frozenset({Authority.DOCTOR}))

        assert (await service.get_view(created.id, patient)).data == "Hemoglobin 140 g/L"
        assert (await service.get_view(created.id, doctor)).id == created.id
        with pytest.raises(AccessDeniedException):
            await service.get_view(created.id, colleague)

    @pytest.mark.asyncio
    async def test_degraded_duty(self, service: ResultService, fake_peer, top_manager: AuthContext) -> None:
        """Should compose with an empty duty when the registration service is down."""
        created = await service.create(blood_test(), top_manager)
        fake_peer.routes["/duties/2"] = 500

        view = await service.get_view(created.id, top_manager)

        assert view.duty is None
        assert view.duty_id == 2
        assert view.client.id == 3

    @pytest.mark.asyncio
    async def test_update_checks_only_changed_references(
        self, service: ResultService, fake_peer, top_manager: AuthContext
    ) -> None:
        """Should leave unchanged references unchecked."""
        created = await service.create(blood_test(), top_manager)
        fake_peer.requests.clear()

        updated = await service.update(created.id, {"data": "Hemoglobin 135 g/L"}, top_manager)

        assert updated.data == "Hemoglobin 135 g/L"
        assert len(fake_peer.requests) == 3

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_client(self, service: ResultService, top_manager: AuthContext) -> None:
        """Should check a changed client at its owner."""
        created = await service.create(blood_test(), top_manager)
        with pytest.raises(ValidationException, match="no client with id 5"):
            await service.update(created.id, {"client_id": 5}, top_manager)

    @pytest.mark.asyncio
    async def test_delete(self, service: ResultService, top_manager: AuthContext) -> None:
        """Should delete the result."""
        created = await service.create(blood_test(), top_manager)
        await service.delete(created.id, top_manager)
        with pytest.raises(EntityNotFoundException, match=f"No result with id {created.id}"):
            await service.get_result(created.id)


class TestResultOwnership:
    """Tests for who may write a result."""

    @pytest.mark.asyncio
    async def test_its_doctor_writes(self, service: ResultService) -> None:
        """Should let the doctor of a result create, update and delete it."""
        created = await service.create(blood_test(), HOUSE)

        updated = await service.update(created.id, {"data": "Hemoglobin 135 g/L"}, HOUSE)
        await service.delete(created.id, HOUSE)

        assert updated.data == "Hemoglobin 135 g/L"
        with pytest.raises(EntityNotFoundException):
            await service.get_result(created.id)

    @pytest.mark.asyncio
    async def test_other_doctor_cannot_create(self, service: ResultService, top_manager: AuthContext) -> None:
        """Should refuse a result written by a doctor it does not belong to."""
        with pytest.raises(AccessDeniedException, match="Not allowed to create result"):
            await service.create(blood_test(), WILSON)
        assert await service.list_results(top_manager) == []

    @pytest.mark.asyncio
    async def test_other_doctor_cannot_change(self, service: ResultService, top_manager: AuthContext) -> None:
        """Should refuse updates and deletes by a doctor the result does not belong to."""
        created = await service.create(blood_test(), top_manager)

        with pytest.raises(AccessDeniedException, match="Not allowed to modify result"):
            await service.update(created.id, {"data": "forged"}, WILSON)
        with pytest.raises(AccessDeniedException, match="Not allowed to delete result"):
            await service.delete(created.id, WILSON)

        assert (await service.get_result(created.id)).data == "Hemoglobin 140 g/L"

    @pytest.mark.asyncio
    async def test_client_cannot_change_someone_elses(
        self, service: ResultService, top_manager: AuthContext
    ) -> None:
        """Should refuse a client who is not the result's client."""
        created = await service.create(blood_test(), top_manager)
        stranger = AuthContext(email="c@d.com", authorities=frozenset({Authority.USER}))

        with pytest.raises(AccessDeniedException):
            await service.delete(created.id, stranger)
