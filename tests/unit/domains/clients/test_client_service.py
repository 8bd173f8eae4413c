# ============================================================================
# Tests for ClientService
# ============================================================================
"""Unit tests for the client service against an in-memory database."""

import pytest

from polyclinic.core.domain import (
    AccessDeniedException,
    Authority,
    ConflictException,
    EntityNotFoundException,
    Sex,
    ValidationException,
)
from polyclinic.core.security.context import AuthContext
from polyclinic.core.security.passwords import verify_password
from polyclinic.domains.clients.application import ClientService
from polyclinic.domains.clients.domain import Client
from polyclinic.domains.clients.infrastructure import SQLAlchemyClientRepository


def new_client(**overrides) -> Client:
    values = dict(
        email="a@b.com",
        password="12345678",
        name="Ann",
        sex=Sex.FEMALE,
        phone_number="+380671234567",
        country="Ukraine",
        city="Kyiv",
        street="Khreshchatyk",
        house_number=1,
    )
    values.update(overrides)
    return Client(**values)


@pytest.fixture
def service(db_session, store_guard) -> ClientService:
    return ClientService(SQLAlchemyClientRepository(db_session), store_guard("Client"))


class TestClientCreate:
    """Tests for client creation."""

    @pytest.mark.asyncio
    async def test_creates_enabled_client_with_id(self, service: ClientService) -> None:
        """Should assign an ID, keep the client enabled and hash the password."""
        saved = await service.create(new_client())

        assert saved.id is not None
        assert saved.enabled is True
        assert verify_password("12345678", saved.password)

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, service: ClientService) -> None:
        """Should reject a 5-character password without touching the store."""
        with pytest.raises(ValidationException) as exc_info:
            await service.create(new_client(password="12345"))

        assert exc_info.value.message == "password must be at least 8 characters long"
        assert await service.list_clients() == []

    @pytest.mark.asyncio
    async def test_all_violations_reported(self, service: ClientService) -> None:
        """Should report every missing field in one message."""
        with pytest.raises(ValidationException) as exc_info:
            await service.create(Client(email="a@b.com", password="12345678"))

        assert exc_info.value.message == (
            "name is mandatory, sex is mandatory, phone number is mandatory, country is mandatory, "
            "city is mandatory, street is mandatory, house number is mandatory"
        )

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, service: ClientService) -> None:
        """Should report a taken email as a conflict."""
        await service.create(new_client())
        with pytest.raises(ConflictException, match="Such a client already exists: a@b.com"):
            await service.create(new_client(name="Other Ann"))


class TestClientUpdate:
    """Tests for partial updates of clients."""

    @pytest.mark.asyncio
    async def test_patch_merges_fields(self, service: ClientService, top_manager: AuthContext) -> None:
        """Should change only the patched fields."""
        saved = await service.create(new_client())
        updated = await service.update(saved.id, {"city": "Lviv"}, top_manager)

        assert updated.city == "Lviv"
        assert updated.street == "Khreshchatyk"
        assert updated.password == saved.password

    @pytest.mark.asyncio
    async def test_client_updates_self(self, service: ClientService, patient: AuthContext) -> None:
        """Should let the client change their own record and re-hash a new password."""
        saved = await service.create(new_client())
        updated = await service.update(saved.id, {"password": "abcdefgh"}, patient)
        assert verify_password("abcdefgh", updated.password)

    @pytest.mark.asyncio
    async def test_other_user_denied(self, service: ClientService) -> None:
        """Should deny changes by another user."""
        saved = await service.create(new_client())
        stranger = AuthContext(email="c@d.com", authorities=frozenset({Authority.USER}))
        with pytest.raises(AccessDeniedException):
            await service.update(saved.id, {"city": "Lviv"}, stranger)

    @pytest.mark.asyncio
    async def test_invalid_patch_rejected(self, service: ClientService, top_manager: AuthContext) -> None:
        """Should revalidate the merged client."""
        saved = await service.create(new_client())
        with pytest.raises(ValidationException, match="email must be valid"):
            await service.update(saved.id, {"email": "not-an-email"}, top_manager)

    @pytest.mark.asyncio
    async def test_disable(self, service: ClientService, top_manager: AuthContext) -> None:
        """Should toggle the enabled flag."""
        saved = await service.create(new_client())
        assert (await service.set_enabled(saved.id, False, top_manager)).enabled is False


class TestClientDelete:
    """Tests for client deletion."""

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, service: ClientService, top_manager: AuthContext) -> None:
        """Should delete the client and report it missing afterwards."""
        saved = await service.create(new_client())
        await service.delete(saved.id, top_manager)

        with pytest.raises(EntityNotFoundException, match=f"No client with id {saved.id}"):
            await service.get_client(saved.id)

    @pytest.mark.asyncio
    async def test_get_by_email(self, service: ClientService) -> None:
        """Should find a client by email."""
        saved = await service.create(new_client())
        assert (await service.get_by_email("a@b.com")).id == saved.id
