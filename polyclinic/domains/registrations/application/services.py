"""
Registration Services

The duty catalog and the registrations booked against it. Doctors and
clients are checked at their owning services on write and resolved on read;
a degraded peer leaves its snapshot empty instead of failing the read.
"""

import logging
from collections.abc import Mapping
from typing import Any

from polyclinic.core.composition import CompositionAssembler
from polyclinic.core.domain import EntityNotFoundException, ValidationException
from polyclinic.core.persistence import CascadeCoordinator, CascadeRule, MergeUpdater, StoreGuard, merge
from polyclinic.core.remote import ForeignKeyChecker
from polyclinic.core.security.capabilities import can_modify_record, can_view_record, ensure
from polyclinic.core.security.context import AuthContext
from polyclinic.core.security.redaction import redact_view
from polyclinic.domains.registrations.application.ports import IDutyRepository, IRegistrationRepository
from polyclinic.domains.registrations.application.views import BookedRegistration, DutyView, RegistrationView
from polyclinic.domains.registrations.domain import Duty, Registration, duty_validator, registration_validator

logger = logging.getLogger(__name__)


class DutyService:
    """Use cases over the duty catalog."""

    def __init__(
        self,
        repository: IDutyRepository,
        registrations: IRegistrationRepository,
        guard: StoreGuard,
        assembler: CompositionAssembler[Duty, DutyView],
    ):
        self._repository = repository
        self._guard = guard
        self._assembler = assembler
        self._updater = MergeUpdater(duty_validator)
        self._cascade = CascadeCoordinator(
            guard,
            [
                CascadeRule(
                    name="registration.duty_id",
                    find_dependents=registrations.find_by_duty,
                    detach=lambda registration, _duty_id: merge(registration, {}, clear=("duty_id",)),
                    persist=registrations.save_all,
                )
            ],
        )

    async def list_duties(self, auth: AuthContext, needed_specialty: str | None = None) -> list[DutyView]:
        duties = await self._guard.run(
            lambda: self._repository.find_all(needed_specialty=needed_specialty), action="list"
        )
        return [redact_view(view, auth) for view in await self._assembler.compose_many(duties, auth)]

    async def get_duty(self, duty_id: int) -> Duty:
        duty = await self._guard.run(lambda: self._repository.find_by_id(duty_id), action="get", target=duty_id)
        if duty is None:
            raise EntityNotFoundException("Duty", duty_id)
        return duty

    async def get_view(self, duty_id: int, auth: AuthContext) -> DutyView:
        """The duty with the doctors of its needed specialty."""
        view = await self._assembler.compose(await self.get_duty(duty_id), auth)
        return redact_view(view, auth)

    async def create(self, duty: Duty) -> Duty:
        duty_validator.check(duty)
        saved = await self._persist(duty, action="create")
        logger.info(f"Duty created: {saved.id}")
        return saved

    async def update(self, duty_id: int, patch: Mapping[str, Any]) -> Duty:
        stored = await self.get_duty(duty_id)
        return await self._persist(self._updater.apply(stored, patch), action="update")

    async def delete(self, duty_id: int) -> None:
        """Clear the duty of every registration booked on it, then delete it."""
        await self.get_duty(duty_id)

        async def delete() -> None:
            await self._repository.delete(duty_id)
            await self._repository.commit()

        actions = await self._cascade.delete(
            duty_id, delete, conflict_message="Delete all registrations of this duty first"
        )
        logger.info(f"Duty deleted: {duty_id} ({actions[0].count} registration(s) cleared)")

    async def _persist(self, duty: Duty, action: str) -> Duty:
        async def save() -> Duty:
            saved = await self._repository.save(duty)
            await self._repository.commit()
            return saved

        return await self._guard.run(
            save, action=action, target=duty.id, conflict_message=f"Such a duty already exists: {duty.name}"
        )


class RegistrationService:
    """Use cases over registrations."""

    def __init__(
        self,
        repository: IRegistrationRepository,
        duties: IDutyRepository,
        guard: StoreGuard,
        doctors: ForeignKeyChecker,
        clients: ForeignKeyChecker,
        assembler: CompositionAssembler[BookedRegistration, RegistrationView],
    ):
        self._repository = repository
        self._duties = duties
        self._guard = guard
        self._doctors = doctors
        self._clients = clients
        self._assembler = assembler
        self._updater = MergeUpdater(registration_validator)

    async def list_registrations(
        self,
        auth: AuthContext,
        doctor_id: int | None = None,
        client_id: int | None = None,
    ) -> list[RegistrationView]:
        """Registrations visible to the caller, composed and redacted."""
        registrations = await self._guard.run(
            lambda: self._repository.find_all(doctor_id=doctor_id, client_id=client_id), action="list"
        )
        views = await self._assembler.compose_many(await self._book(registrations), auth)
        return [redact_view(view, auth) for view in views if self._can_view(view, auth)]

    async def get_registration(self, registration_id: int) -> Registration:
        registration = await self._guard.run(
            lambda: self._repository.find_by_id(registration_id), action="get", target=registration_id
        )
        if registration is None:
            raise EntityNotFoundException("Registration", registration_id)
        return registration

    async def get_view(self, registration_id: int, auth: AuthContext) -> RegistrationView:
        """
        Raises:
            EntityNotFoundException: Unknown registration
            AccessDeniedException: Caller is neither its client, its doctor nor a top manager
        """
        view = await self._compose(await self.get_registration(registration_id), auth)
        ensure(self._can_view(view, auth), auth, "view registration")
        return redact_view(view, auth)

    async def create(self, registration: Registration, auth: AuthContext) -> RegistrationView:
        """
        Raises:
            ValidationException: Constraint violations, unknown duty, doctor or client
            RemoteUnavailableException: Employee or client service could not be asked
        """
        registration_validator.check(registration)
        if registration.duty_id is None:
            raise ValidationException("Duty ID is mandatory", field="duty_id")
        await self._require_duty(registration.duty_id)
        await self._doctors.require(registration.doctor_id, auth=auth)
        await self._clients.require(registration.client_id, auth=auth)

        saved = await self._persist(registration, action="create")
        logger.info(f"Registration created: {saved.id} (doctor {saved.doctor_id}, client {saved.client_id})")
        return redact_view(await self._compose(saved, auth), auth)

    async def update(self, registration_id: int, patch: Mapping[str, Any], auth: AuthContext) -> RegistrationView:
        stored = await self.get_registration(registration_id)
        await self._ensure_can_modify(stored, auth, "modify registration")
        updated = self._updater.apply(stored, patch)
        if updated.duty_id != stored.duty_id:
            await self._require_duty(updated.duty_id)
        if updated.doctor_id != stored.doctor_id:
            await self._doctors.require(updated.doctor_id, auth=auth)
        if updated.client_id != stored.client_id:
            await self._clients.require(updated.client_id, auth=auth)
        saved = await self._persist(updated, action="update")
        return redact_view(await self._compose(saved, auth), auth)

    async def set_active(self, registration_id: int, is_active: bool, auth: AuthContext) -> RegistrationView:
        """Only its client, its doctor or a top manager may change the status."""
        stored = await self.get_registration(registration_id)
        await self._ensure_can_modify(stored, auth, "change registration status")
        saved = await self._persist(self._updater.apply(stored, {"is_active": is_active}), action="status")
        return redact_view(await self._compose(saved, auth), auth)

    async def delete(self, registration_id: int) -> None:
        await self.get_registration(registration_id)

        async def delete() -> None:
            await self._repository.delete(registration_id)
            await self._repository.commit()

        await self._guard.run(delete, action="delete", target=registration_id)
        logger.info(f"Registration deleted: {registration_id}")

    async def _compose(self, registration: Registration, auth: AuthContext) -> RegistrationView:
        return await self._assembler.compose((await self._book([registration]))[0], auth)

    async def _book(self, registrations: list[Registration]) -> list[BookedRegistration]:
        duty_ids = {r.duty_id for r in registrations if r.duty_id is not None}
        duties = await self._guard.run(lambda: self._duties.find_by_ids(duty_ids), action="load duties")
        by_id = {duty.id: duty for duty in duties}
        return [BookedRegistration(r, by_id.get(r.duty_id)) for r in registrations]

    async def _require_duty(self, duty_id: int | None) -> None:
        if duty_id is None:
            return
        duty = await self._guard.run(lambda: self._duties.find_by_id(duty_id), action="check duty", target=duty_id)
        if duty is None:
            raise ValidationException(f"no duty with id {duty_id}", field="duty_id")

    async def _ensure_can_modify(self, registration: Registration, auth: AuthContext, action: str) -> None:
        if can_modify_record(auth, None, None):
            return
        resolved = await self._assembler.resolve(BookedRegistration(registration, None), auth)
        client, doctor = resolved.get("client"), resolved.get("doctor")
        allowed = can_modify_record(auth, client.email if client else None, doctor.email if doctor else None)
        ensure(allowed, auth, action)

    @staticmethod
    def _can_view(view: RegistrationView, auth: AuthContext) -> bool:
        client_email = view.client.email if view.client else None
        doctor_email = view.doctor.email if view.doctor else None
        return can_view_record(auth, client_email, doctor_email)

    async def _persist(self, registration: Registration, action: str) -> Registration:
        async def save() -> Registration:
            saved = await self._repository.save(registration)
            await self._repository.commit()
            return saved

        return await self._guard.run(save, action=action, target=registration.id)
