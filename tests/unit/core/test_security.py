# ============================================================================
# Tests for the authentication context, capabilities and redaction
# ============================================================================
"""Unit tests for caller identity and what it may see."""

import pytest
from pydantic import BaseModel

from conftest import TEST_SECRET, make_token
from polyclinic.core.composition.snapshots import ClientSnapshot, DoctorSnapshot, PersonalDataSnapshot
from polyclinic.core.domain import AccessDeniedException, Authority, AuthenticationRequiredException
from polyclinic.core.security.capabilities import (
    can_modify_client,
    can_modify_employee,
    can_modify_record,
    can_view_record,
    ensure,
)
from polyclinic.core.security.context import AuthContext, TokenDecoder
from polyclinic.core.security.passwords import hash_password, verify_password
from polyclinic.core.security.redaction import redact_view


class Visit(BaseModel):
    id: int
    doctor: DoctorSnapshot | None = None
    client: ClientSnapshot | None = None


def user(email: str, *authorities: Authority) -> AuthContext:
    return AuthContext(email=email, authorities=frozenset(authorities))


class TestTokenDecoder:
    """Tests for TokenDecoder."""

    def test_decodes_claims(self) -> None:
        """Should read the subject and authorities of a valid token."""
        token = make_token("house@clinic.com", Authority.DOCTOR)
        ctx = TokenDecoder(TEST_SECRET).from_header(f"Bearer {token}")

        assert ctx.email == "house@clinic.com"
        assert ctx.authorities == frozenset({Authority.DOCTOR})
        assert ctx.forwarded_headers() == {"Authorization": f"Bearer {token}"}

    def test_missing_header_is_anonymous(self) -> None:
        """Should build an anonymous context without a header."""
        ctx = TokenDecoder(TEST_SECRET).from_header(None)
        assert not ctx.is_authenticated
        assert ctx.forwarded_headers() == {}

    def test_bad_signature_rejected(self) -> None:
        """Should reject a token signed with another key."""
        token = make_token("house@clinic.com", Authority.DOCTOR)
        with pytest.raises(AuthenticationRequiredException, match="Invalid token"):
            TokenDecoder("other-secret").decode(token)

    def test_unsupported_scheme_rejected(self) -> None:
        """Should reject non-bearer authorization."""
        with pytest.raises(AuthenticationRequiredException):
            TokenDecoder(TEST_SECRET).from_header("Basic dXNlcjpwYXNz")


class TestCapabilities:
    """Tests for capability rules."""

    def test_ensure_distinguishes_anonymous(self) -> None:
        """Should raise 401 for anonymous callers and 403 otherwise."""
        with pytest.raises(AuthenticationRequiredException):
            ensure(False, AuthContext.anonymous(), "list clients")
        with pytest.raises(AccessDeniedException):
            ensure(False, user("a@b.com", Authority.USER), "list clients")

    def test_client_modification(self) -> None:
        """Should allow the client themselves and top managers."""
        assert can_modify_client(user("a@b.com", Authority.USER), "a@b.com")
        assert not can_modify_client(user("c@d.com", Authority.USER), "a@b.com")
        assert can_modify_client(user("boss@clinic.com", Authority.TOP_MANAGER), "a@b.com")

    def test_employee_modification(self) -> None:
        """Should allow managers and the employee themselves."""
        assert can_modify_employee(user("tm@clinic.com", Authority.TEAM_MANAGER), "house@clinic.com")
        assert can_modify_employee(user("house@clinic.com", Authority.DOCTOR), "house@clinic.com")
        assert not can_modify_employee(user("wilson@clinic.com", Authority.DOCTOR), "house@clinic.com")

    def test_record_visibility(self) -> None:
        """Should show records to their client, their doctor and top managers."""
        assert can_view_record(user("a@b.com", Authority.USER), "a@b.com", "house@clinic.com")
        assert not can_view_record(user("c@d.com", Authority.USER), "a@b.com", "house@clinic.com")
        assert can_view_record(user("house@clinic.com", Authority.DOCTOR), "a@b.com", "house@clinic.com")
        assert can_view_record(user("boss@clinic.com", Authority.TOP_MANAGER), None, None)
        assert not can_view_record(user("a@b.com", Authority.USER), None, "house@clinic.com")

    def test_record_modification(self) -> None:
        """Should let only the record's client, its doctor and top managers write it."""
        assert can_modify_record(user("a@b.com", Authority.USER), "a@b.com", "house@clinic.com")
        assert can_modify_record(user("house@clinic.com", Authority.DOCTOR), "a@b.com", "house@clinic.com")
        assert not can_modify_record(user("wilson@clinic.com", Authority.DOCTOR), "a@b.com", "house@clinic.com")
        assert can_modify_record(user("boss@clinic.com", Authority.TOP_MANAGER), None, None)
        assert not can_modify_record(user("house@clinic.com", Authority.DOCTOR), None, None)
        assert not can_modify_record(AuthContext.anonymous(), "a@b.com", "house@clinic.com")


class TestRedaction:
    """Tests for redact_view."""

    @pytest.fixture
    def visit(self) -> Visit:
        return Visit(
            id=1,
            doctor=DoctorSnapshot(
                id=7,
                email="house@clinic.com",
                personal_data=PersonalDataSnapshot(name="Gregory House", phone="+380501112233", sex="MALE"),
            ),
            client=ClientSnapshot(id=3, email="a@b.com", name="Ann", phone_number="+380671234567", city="Kyiv"),
        )

    def test_top_manager_sees_everything(self, visit: Visit) -> None:
        """Should leave the view untouched for top managers."""
        assert redact_view(visit, user("boss@clinic.com", Authority.TOP_MANAGER)) is visit

    def test_owner_keeps_own_details(self, visit: Visit) -> None:
        """Should keep the client's details for the client and hide the doctor's."""
        redacted = redact_view(visit, user("a@b.com", Authority.USER))

        assert redacted.client.phone_number == "+380671234567"
        assert redacted.doctor.personal_data.name == "Gregory House"
        assert redacted.doctor.personal_data.phone is None

    def test_others_see_public_fields(self, visit: Visit) -> None:
        """Should hide private client fields from other viewers."""
        redacted = redact_view(visit, user("house@clinic.com", Authority.DOCTOR))

        assert redacted.client.name == "Ann"
        assert redacted.client.phone_number is None
        assert redacted.client.city is None
        assert redacted.doctor.personal_data.phone == "+380501112233"


class TestPasswords:
    """Tests for password hashing."""

    def test_hash_and_verify(self) -> None:
        """Should verify the original password against its hash."""
        hashed = hash_password("12345678")
        assert hashed != "12345678"
        assert verify_password("12345678", hashed)
        assert not verify_password("87654321", hashed)
