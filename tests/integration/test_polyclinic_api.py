# ============================================================================
# HTTP tests for the mounted services
# ============================================================================
"""
Integration tests through the FastAPI application.

The app runs on in-memory SQLite; every peer service it calls is served by
`fake_peer`.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from conftest import make_token
from polyclinic.core.app_factory import create_app
from polyclinic.core.domain import Authority

pytestmark = pytest.mark.integration

CLIENT = {
    "email": "a@b.com",
    "password": "12345678",
    "name": "Ann",
    "sex": "FEMALE",
    "phoneNumber": "+380671234567",
    "country": "Ukraine",
    "city": "Kyiv",
    "street": "Khreshchatyk",
    "houseNumber": 1,
}
ADDRESS = {"country": "Ukraine", "state": "Kyiv", "city": "Kyiv", "street": "Khreshchatyk", "houseNumber": 1}
DOCTOR = {"id": 7, "email": "house@clinic.com", "personalData": {"name": "Gregory House"}}


def bearer(email: str, *authorities: Authority) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(email, *authorities)}"}


BOSS = bearer("boss@clinic.com", Authority.TOP_MANAGER)
PATIENT = bearer("a@b.com", Authority.USER)
HOUSE = bearer("house@clinic.com", Authority.DOCTOR)
WILSON = bearer("wilson@clinic.com", Authority.DOCTOR)


@pytest.fixture
def client(settings, fake_peer) -> Generator[TestClient, None, None]:
    app = create_app(settings, transport=fake_peer.transport)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


def assert_error(response, status: int, error: str, path: str) -> None:
    body = response.json()
    assert response.status_code == status
    assert body["status"] == status
    assert body["error"] == error
    assert body["path"] == path
    assert body["timestamp"]


class TestErrorContract:
    """Tests for the error body shared by every service."""

    def test_validation_error_is_lower_cased(self, client: TestClient) -> None:
        """Should answer 400 with the aggregated lower-case message."""
        response = client.post("/clients", json={**CLIENT, "password": "12345"})
        assert_error(response, 400, "password must be at least 8 characters long", "/clients")

    def test_malformed_body_is_400(self, client: TestClient) -> None:
        """Should report schema errors like constraint violations."""
        response = client.post("/clients", json={**CLIENT, "houseNumber": "first"})
        assert response.status_code == 400
        assert response.json()["error"].startswith("housenumber:")

    def test_unknown_entity_is_404(self, client: TestClient) -> None:
        """Should answer 404 for an unknown ID."""
        assert_error(client.get("/clients/999"), 404, "No client with id 999", "/clients/999")

    def test_unknown_path_is_404(self, client: TestClient) -> None:
        """Should answer 404 'Not found' for an unknown path."""
        assert_error(client.get("/nowhere"), 404, "Not found", "/nowhere")

    def test_wrong_method_is_405(self, client: TestClient) -> None:
        """Should answer 405 for an unsupported method."""
        assert_error(client.put("/clients/1", json={}), 405, "Method not allowed", "/clients/1")

    def test_anonymous_is_401(self, client: TestClient) -> None:
        """Should require a token for protected reads."""
        assert_error(client.get("/clients"), 401, "Authentication required", "/clients")

    def test_bad_token_is_401(self, client: TestClient) -> None:
        """Should reject a token that does not verify."""
        response = client.get("/clients", headers={"Authorization": "Bearer not-a-token"})
        assert_error(response, 401, "Invalid token", "/clients")

    def test_missing_authority_is_403(self, client: TestClient) -> None:
        """Should deny a listing to a plain user."""
        assert client.get("/clients", headers=PATIENT).status_code == 403


class TestClientsApi:
    """Tests for the client endpoints."""

    def test_create_and_read(self, client: TestClient) -> None:
        """Should create an enabled client without exposing the password."""
        created = client.post("/clients", json=CLIENT)
        assert created.status_code == 201
        body = created.json()
        assert body["id"] is not None
        assert body["enabled"] is True
        assert body["phoneNumber"] == "+380671234567"
        assert "password" not in body

        listed = client.get("/clients", headers=BOSS)
        assert [c["email"] for c in listed.json()] == ["a@b.com"]

        own = client.get("/clients", params={"email": "a@b.com"}, headers=PATIENT)
        assert own.json()[0]["id"] == body["id"]

    def test_duplicate_email(self, client: TestClient) -> None:
        """Should answer 400 with the lower-cased conflict message."""
        client.post("/clients", json=CLIENT)
        response = client.post("/clients", json=CLIENT)
        assert_error(response, 400, "such a client already exists: a@b.com", "/clients")

    def test_patch_and_status(self, client: TestClient) -> None:
        """Should merge a patch and toggle the status."""
        client_id = client.post("/clients", json=CLIENT).json()["id"]

        patched = client.patch(f"/clients/{client_id}", json={"city": "Lviv"}, headers=PATIENT)
        assert patched.json()["city"] == "Lviv"
        assert patched.json()["street"] == "Khreshchatyk"

        disabled = client.patch(f"/clients/{client_id}/status", params={"isActive": "false"}, headers=BOSS)
        assert disabled.json()["enabled"] is False


class TestClinicApi:
    """Tests for the clinic endpoints."""

    def test_facility_lifecycle(self, client: TestClient) -> None:
        """Should link, list and delete a facility."""
        department = client.post("/departments", json={"address": ADDRESS}, headers=BOSS).json()
        facility = client.post(
            "/facilities", json={"name": "Main", "departmentIds": [department["id"]]}, headers=BOSS
        )
        assert facility.status_code == 201
        facility_id = facility.json()["id"]

        linked = client.get(f"/departments/{department['id']}").json()
        assert linked["facilityIds"] == [facility_id]

        blocked = client.delete(f"/departments/{department['id']}", headers=BOSS)
        assert blocked.status_code == 400
        assert blocked.json()["error"] == "delete all doctors and facilities related to this department first"

        assert client.delete(f"/facilities/{facility_id}", headers=BOSS).status_code == 204
        assert client.get(f"/departments/{department['id']}").json()["facilityIds"] == []

    def test_writes_need_top_manager(self, client: TestClient) -> None:
        """Should refuse clinic writes to other callers."""
        assert client.post("/departments", json={"address": ADDRESS}, headers=PATIENT).status_code == 403


def book(client: TestClient, fake_peer, headers: dict[str, str] = PATIENT) -> int:
    """Create a duty and a registration of client 3 with doctor 7."""
    fake_peer.routes.update({"/doctors/7": DOCTOR, "/clients/3": {"id": 3, "email": "a@b.com"}})
    duty = client.post(
        "/duties",
        json={"name": "Consultation", "description": "First visit", "neededSpecialty": "x", "price": "25.00"},
        headers=BOSS,
    ).json()
    created = client.post(
        "/registrations",
        json={"dutyId": duty["id"], "date": "2026-11-02T10:30:00", "doctorId": 7, "clientId": 3},
        headers=headers,
    )
    assert created.status_code == 201
    return created.json()["id"]


class TestRegistrationsApi:
    """Tests for registrations composed from peer services."""

    def test_peer_down_is_500(self, client: TestClient, fake_peer) -> None:
        """Should answer 500 when the employee service cannot confirm the doctor."""
        duty = client.post(
            "/duties",
            json={"name": "Consultation", "description": "First visit", "neededSpecialty": "x", "price": "25.00"},
            headers=BOSS,
        ).json()
        fake_peer.routes["/doctors/7"] = 503

        response = client.post(
            "/registrations",
            json={"dutyId": duty["id"], "date": "2026-11-02T10:30:00", "doctorId": 7, "clientId": 3},
            headers=BOSS,
        )

        assert_error(response, 500, "employee-service unavailable", "/registrations")

    def test_composed_registration(self, client: TestClient, fake_peer) -> None:
        """Should answer with the doctor and client resolved from their services."""
        fake_peer.routes.update({"/doctors/7": DOCTOR, "/clients/3": {"id": 3, "email": "a@b.com"}})
        duty = client.post(
            "/duties",
            json={"name": "Consultation", "description": "First visit", "neededSpecialty": "x", "price": "25.00"},
            headers=BOSS,
        ).json()

        created = client.post(
            "/registrations",
            json={"dutyId": duty["id"], "date": "2026-11-02T10:30:00", "doctorId": 7, "clientId": 3},
            headers=PATIENT,
        )

        assert created.status_code == 201
        body = created.json()
        assert body["isActive"] is True
        assert body["duty"]["name"] == "Consultation"
        assert body["doctor"]["personalData"]["name"] == "Gregory House"
        assert body["client"]["email"] == "a@b.com"

    def test_status_changed_by_owners_only(self, client: TestClient, fake_peer) -> None:
        """Should let the client and the doctor of a registration change its status, not other doctors."""
        registration_id = book(client, fake_peer)
        path = f"/registrations/{registration_id}/status"

        by_client = client.patch(path, params={"isActive": "false"}, headers=PATIENT)
        by_doctor = client.patch(path, params={"isActive": "true"}, headers=HOUSE)
        by_colleague = client.patch(path, params={"isActive": "false"}, headers=WILSON)

        assert by_client.status_code == 200
        assert by_client.json()["isActive"] is False
        assert by_doctor.json()["isActive"] is True
        assert_error(by_colleague, 403, "Not allowed to change registration status", path)
        assert client.get(f"/registrations/{registration_id}", headers=BOSS).json()["isActive"] is True

    def test_peer_calls_carry_correlation_id(self, client: TestClient, fake_peer) -> None:
        """Should forward the caller's correlation ID to every peer it asks."""
        book(client, fake_peer, headers={**PATIENT, "X-Correlation-ID": "visit-42"})

        assert fake_peer.requests
        assert {r.headers["X-Correlation-ID"] for r in fake_peer.requests} == {"visit-42"}


class TestHealth:
    """Tests for the health endpoint."""

    def test_reports_breakers(self, client: TestClient) -> None:
        """Should list the breakers created so far."""
        client.get("/clients/1")

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["circuit_breakers"]["clients.database"]["state"] == "closed"
        assert "X-Correlation-ID" in response.headers
