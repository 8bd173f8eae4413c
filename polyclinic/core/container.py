"""
Dependency Injection Container

Wires each service's application layer to its repositories, its local-store
guard and the gated clients of the peers it consumes. One container lives per
process; services are built per request around the request's session.
"""

import logging
from dataclasses import replace

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from polyclinic.config.settings import Settings, get_settings
from polyclinic.core.composition import CompositionAssembler, ForeignField
from polyclinic.core.composition.snapshots import ClientSnapshot, DoctorSnapshot, DutySnapshot
from polyclinic.core.infrastructure import CircuitBreakerConfig, CircuitBreakerRegistry
from polyclinic.core.persistence import STORE_EXCLUDED_EXCEPTIONS, StoreGuard
from polyclinic.core.remote import ForeignKeyChecker, PeerClient, PeerNotFoundError, RemoteResolver
from polyclinic.core.security.context import TokenDecoder
from polyclinic.domains.clients.application import ClientService
from polyclinic.domains.clients.infrastructure import SQLAlchemyClientRepository
from polyclinic.domains.clinic.application import DepartmentService, FacilityService
from polyclinic.domains.clinic.infrastructure import (
    SQLAlchemyDepartmentRepository,
    SQLAlchemyFacilityRepository,
    SQLAlchemyLinkRepository,
)
from polyclinic.domains.employees.application import EmployeeService
from polyclinic.domains.employees.infrastructure import SQLAlchemyEmployeeRepository
from polyclinic.domains.registrations.application import (
    DutyService,
    DutyView,
    RegistrationService,
    RegistrationView,
)
from polyclinic.domains.registrations.infrastructure import (
    SQLAlchemyDutyRepository,
    SQLAlchemyRegistrationRepository,
)
from polyclinic.domains.results.application import ResultService, ResultView
from polyclinic.domains.results.infrastructure import SQLAlchemyResultRepository

logger = logging.getLogger(__name__)

CLIENT_SERVICE = "client-service"
CLINIC_SERVICE = "clinic-service"
EMPLOYEE_SERVICE = "employee-service"
REGISTRATION_SERVICE = "registration-service"


class ServiceContainer:
    """
    Process-wide dependencies.

    Breakers are keyed "<consumer>.<dependency>": the registration service's
    view of the employee service is isolated from the result service's.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            settings: Application settings (uses default if not provided)
            transport: Transport shared by every peer client (tests mount httpx.MockTransport)
        """
        self.settings = settings or get_settings()
        self._transport = transport
        self.breaker_config = CircuitBreakerConfig(
            sliding_window_size=self.settings.BREAKER_SLIDING_WINDOW_SIZE,
            minimum_calls=self.settings.BREAKER_MINIMUM_CALLS,
            failure_rate_threshold=self.settings.BREAKER_FAILURE_RATE_THRESHOLD,
            slow_call_rate_threshold=self.settings.BREAKER_SLOW_CALL_RATE_THRESHOLD,
            slow_call_duration=self.settings.BREAKER_SLOW_CALL_DURATION_SECONDS,
            wait_duration_open=self.settings.BREAKER_WAIT_DURATION_OPEN_SECONDS,
            permitted_calls_half_open=self.settings.BREAKER_PERMITTED_CALLS_HALF_OPEN,
        )
        self.breakers = CircuitBreakerRegistry(self.breaker_config)
        self.token_decoder = TokenDecoder(self.settings.JWT_SECRET_KEY, self.settings.JWT_ALGORITHM)
        self._peers: dict[str, PeerClient] = {}
        self._base_urls = {
            CLIENT_SERVICE: self.settings.CLIENT_SERVICE_URL,
            CLINIC_SERVICE: self.settings.CLINIC_SERVICE_URL,
            EMPLOYEE_SERVICE: self.settings.EMPLOYEE_SERVICE_URL,
            REGISTRATION_SERVICE: self.settings.REGISTRATION_SERVICE_URL,
        }

    # ============================================================
    # Gates and peers
    # ============================================================

    def peer(self, consumer: str, peer: str) -> PeerClient:
        """Gated client of `peer` as seen from `consumer`, created once."""
        key = f"{consumer}.{peer}"
        if key not in self._peers:
            # A 404 is a healthy answer from the peer.
            breaker = self.breakers.get_or_create(
                key, replace(self.breaker_config, excluded_exceptions=(PeerNotFoundError,))
            )
            self._peers[key] = PeerClient(
                peer,
                self._base_urls[peer],
                breaker,
                timeout=self.settings.PEER_TIMEOUT_SECONDS,
                transport=self._transport,
            )
            logger.debug(f"Peer client created: {key} -> {self._base_urls[peer]}")
        return self._peers[key]

    def store_guard(self, service: str, resource: str) -> StoreGuard:
        breaker = self.breakers.get_or_create(
            f"{service}.database", replace(self.breaker_config, excluded_exceptions=STORE_EXCLUDED_EXCEPTIONS)
        )
        return StoreGuard(breaker, resource)

    def doctor_resolver(self, consumer: str) -> RemoteResolver[DoctorSnapshot]:
        return RemoteResolver(self.peer(consumer, EMPLOYEE_SERVICE), "doctors", DoctorSnapshot, "Doctor")

    def client_resolver(self, consumer: str) -> RemoteResolver[ClientSnapshot]:
        return RemoteResolver(self.peer(consumer, CLIENT_SERVICE), "clients", ClientSnapshot, "Client")

    # ============================================================
    # Services
    # ============================================================

    def create_client_service(self, session: AsyncSession) -> ClientService:
        return ClientService(SQLAlchemyClientRepository(session), self.store_guard("clients", "Client"))

    def create_department_service(self, session: AsyncSession) -> DepartmentService:
        return DepartmentService(SQLAlchemyDepartmentRepository(session), self.store_guard("clinic", "Department"))

    def create_facility_service(self, session: AsyncSession) -> FacilityService:
        return FacilityService(
            SQLAlchemyFacilityRepository(session),
            SQLAlchemyDepartmentRepository(session),
            SQLAlchemyLinkRepository(session),
            self.store_guard("clinic", "Facility"),
        )

    def create_employee_service(self, session: AsyncSession) -> EmployeeService:
        return EmployeeService(
            SQLAlchemyEmployeeRepository(session),
            self.store_guard("employees", "Employee"),
            ForeignKeyChecker(self.peer("employees", CLINIC_SERVICE), "departments", "Department"),
        )

    def create_duty_service(self, session: AsyncSession) -> DutyService:
        assembler = CompositionAssembler(
            [
                ForeignField.by_search(
                    "doctors",
                    self.doctor_resolver("registrations"),
                    lambda duty: {"specialty": duty.needed_specialty} if duty.needed_specialty else None,
                )
            ],
            build=DutyView.compose,
        )
        return DutyService(
            SQLAlchemyDutyRepository(session),
            SQLAlchemyRegistrationRepository(session),
            self.store_guard("registrations", "Duty"),
            assembler,
        )

    def create_registration_service(self, session: AsyncSession) -> RegistrationService:
        assembler = CompositionAssembler(
            [
                ForeignField.by_id("doctor", self.doctor_resolver("registrations"), lambda b: b.registration.doctor_id),
                ForeignField.by_id("client", self.client_resolver("registrations"), lambda b: b.registration.client_id),
            ],
            build=RegistrationView.compose,
        )
        return RegistrationService(
            SQLAlchemyRegistrationRepository(session),
            SQLAlchemyDutyRepository(session),
            self.store_guard("registrations", "Registration"),
            ForeignKeyChecker(self.peer("registrations", EMPLOYEE_SERVICE), "doctors", "Doctor"),
            ForeignKeyChecker(self.peer("registrations", CLIENT_SERVICE), "clients", "Client"),
            assembler,
        )

    def create_result_service(self, session: AsyncSession) -> ResultService:
        duties = self.peer("results", REGISTRATION_SERVICE)
        assembler = CompositionAssembler(
            [
                ForeignField.by_id("duty", RemoteResolver(duties, "duties", DutySnapshot, "Duty"), lambda r: r.duty_id),
                ForeignField.by_id("doctor", self.doctor_resolver("results"), lambda r: r.doctor_id),
                ForeignField.by_id("client", self.client_resolver("results"), lambda r: r.client_id),
            ],
            build=ResultView.compose,
        )
        return ResultService(
            SQLAlchemyResultRepository(session),
            self.store_guard("results", "Result"),
            ForeignKeyChecker(duties, "duties", "Duty"),
            ForeignKeyChecker(self.peer("results", EMPLOYEE_SERVICE), "doctors", "Doctor"),
            ForeignKeyChecker(self.peer("results", CLIENT_SERVICE), "clients", "Client"),
            assembler,
        )

    async def close(self) -> None:
        """Close every peer client."""
        for client in self._peers.values():
            await client.close()
        logger.info(f"Closed {len(self._peers)} peer client(s)")
        self._peers.clear()
