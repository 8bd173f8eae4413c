"""
Result Service
"""

import logging
from collections.abc import Mapping
from typing import Any

from polyclinic.core.composition import CompositionAssembler
from polyclinic.core.domain import EntityNotFoundException
from polyclinic.core.persistence import MergeUpdater, StoreGuard
from polyclinic.core.remote import ForeignKeyChecker
from polyclinic.core.security.capabilities import can_modify_record, can_view_record, ensure
from polyclinic.core.security.context import AuthContext
from polyclinic.core.security.redaction import redact_view
from polyclinic.domains.results.application.ports import IResultRepository
from polyclinic.domains.results.application.views import ResultView
from polyclinic.domains.results.domain import Result, result_validator

logger = logging.getLogger(__name__)


class ResultService:
    """
    Use cases over results.

    All three references are checked at their owners before a write and
    resolved again on every read.
    """

    def __init__(
        self,
        repository: IResultRepository,
        guard: StoreGuard,
        duties: ForeignKeyChecker,
        doctors: ForeignKeyChecker,
        clients: ForeignKeyChecker,
        assembler: CompositionAssembler[Result, ResultView],
    ):
        self._repository = repository
        self._guard = guard
        self._duties = duties
        self._doctors = doctors
        self._clients = clients
        self._assembler = assembler
        self._updater = MergeUpdater(result_validator)

    async def list_results(
        self,
        auth: AuthContext,
        doctor_id: int | None = None,
        client_id: int | None = None,
    ) -> list[ResultView]:
        results = await self._guard.run(
            lambda: self._repository.find_all(doctor_id=doctor_id, client_id=client_id), action="list"
        )
        views = await self._assembler.compose_many(results, auth)
        return [redact_view(view, auth) for view in views if self._can_view(view, auth)]

    async def get_result(self, result_id: int) -> Result:
        result = await self._guard.run(lambda: self._repository.find_by_id(result_id), action="get", target=result_id)
        if result is None:
            raise EntityNotFoundException("Result", result_id)
        return result

    async def get_view(self, result_id: int, auth: AuthContext) -> ResultView:
        view = await self._assembler.compose(await self.get_result(result_id), auth)
        ensure(self._can_view(view, auth), auth, "view result")
        return redact_view(view, auth)

    async def create(self, result: Result, auth: AuthContext) -> ResultView:
        """
        Raises:
            ValidationException: Missing data, unknown duty, doctor or client
            RemoteUnavailableException: A peer could not be asked
            AccessDeniedException: Caller is neither its client, its doctor nor a top manager
        """
        result_validator.check(result)
        await self._duties.require(result.duty_id, auth=auth)
        await self._doctors.require(result.doctor_id, auth=auth)
        await self._clients.require(result.client_id, auth=auth)
        await self._ensure_can_modify(result, auth, "create result")

        saved = await self._persist(result, action="create")
        logger.info(f"Result created: {saved.id} (client {saved.client_id})")
        return redact_view(await self._assembler.compose(saved, auth), auth)

    async def update(self, result_id: int, patch: Mapping[str, Any], auth: AuthContext) -> ResultView:
        stored = await self.get_result(result_id)
        await self._ensure_can_modify(stored, auth, "modify result")
        updated = self._updater.apply(stored, patch)
        for checker, field in ((self._duties, "duty_id"), (self._doctors, "doctor_id"), (self._clients, "client_id")):
            if getattr(updated, field) != getattr(stored, field):
                await checker.require(getattr(updated, field), auth=auth)
        saved = await self._persist(updated, action="update")
        return redact_view(await self._assembler.compose(saved, auth), auth)

    async def delete(self, result_id: int, auth: AuthContext) -> None:
        await self._ensure_can_modify(await self.get_result(result_id), auth, "delete result")

        async def delete() -> None:
            await self._repository.delete(result_id)
            await self._repository.commit()

        await self._guard.run(delete, action="delete", target=result_id)
        logger.info(f"Result deleted: {result_id}")

    async def _ensure_can_modify(self, result: Result, auth: AuthContext, action: str) -> None:
        if can_modify_record(auth, None, None):
            return
        resolved = await self._assembler.resolve(result, auth)
        client, doctor = resolved.get("client"), resolved.get("doctor")
        allowed = can_modify_record(auth, client.email if client else None, doctor.email if doctor else None)
        ensure(allowed, auth, action)

    @staticmethod
    def _can_view(view: ResultView, auth: AuthContext) -> bool:
        client_email = view.client.email if view.client else None
        doctor_email = view.doctor.email if view.doctor else None
        return can_view_record(auth, client_email, doctor_email)

    async def _persist(self, result: Result, action: str) -> Result:
        async def save() -> Result:
            saved = await self._repository.save(result)
            await self._repository.commit()
            return saved

        return await self._guard.run(save, action=action, target=result.id)
