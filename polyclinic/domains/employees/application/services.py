"""
Employee Service

Use cases over doctors, team managers and top managers. The department of a
doctor or team manager lives at the clinic service and is checked there
before every write that sets it.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from polyclinic.core.domain import EntityNotFoundException, ValidationException
from polyclinic.core.persistence import CascadeCoordinator, CascadeRule, MergeUpdater, StoreGuard, merge
from polyclinic.core.remote import ForeignKeyChecker
from polyclinic.core.security.capabilities import can_modify_employee, ensure
from polyclinic.core.security.context import AuthContext
from polyclinic.core.security.passwords import hash_password
from polyclinic.domains.employees.application.ports import IEmployeeRepository
from polyclinic.domains.employees.domain import Employee, Role, foreign_role_fields, has_department, validator_for

logger = logging.getLogger(__name__)

ROLE_LABELS = {
    Role.DOCTOR: "Doctor",
    Role.TEAM_MANAGER: "Team manager",
    Role.TOP_MANAGER: "Top manager",
}


class EmployeeService:
    """
    Use cases over employees of every role.

    Every operation names the role it works on; an employee of another role
    with the same ID is reported as not found.
    """

    def __init__(self, repository: IEmployeeRepository, guard: StoreGuard, departments: ForeignKeyChecker):
        self._repository = repository
        self._guard = guard
        self._departments = departments
        self._cascade = CascadeCoordinator(
            guard,
            [
                CascadeRule(
                    name="team_manager.team",
                    find_dependents=self._repository.find_teams_with,
                    detach=self._remove_from_team,
                    persist=self._repository.save_all,
                )
            ],
        )

    async def list_employees(
        self,
        role: Role,
        department_id: int | None = None,
        specialty: str | None = None,
        email: str | None = None,
    ) -> list[Employee]:
        return await self._guard.run(
            lambda: self._repository.find_all(role, department_id=department_id, specialty=specialty, email=email),
            action=f"list {role.value.lower()}",
        )

    async def get_employee(self, role: Role, employee_id: int) -> Employee:
        employee = await self._guard.run(
            lambda: self._repository.find_by_id(employee_id, role), action="get", target=employee_id
        )
        if employee is None:
            raise EntityNotFoundException(ROLE_LABELS[role], employee_id)
        return employee

    async def create(self, employee: Employee, auth: AuthContext) -> Employee:
        """
        Validate locally, check the department at the clinic service and the
        team members locally, then store.

        Raises:
            ValidationException: Constraint violations, unknown department or doctor
            RemoteUnavailableException: Clinic service could not be asked
            ConflictException: Email already taken
        """
        validator_for(employee.role).check(employee)
        self._reject_foreign_fields(employee.role, {f: getattr(employee, f) for f in foreign_role_fields(employee.role)})
        if has_department(employee.role):
            await self._departments.require(employee.department_id, auth=auth)
        if employee.role == Role.TEAM_MANAGER:
            await self._require_doctors(employee.team)

        prepared = merge(employee, {"password": hash_password(employee.password or "")})
        saved = await self._persist(prepared, action="create")
        logger.info(f"{ROLE_LABELS[saved.role]} created: {saved.id}")
        return saved

    async def update(
        self,
        role: Role,
        employee_id: int,
        patch: Mapping[str, Any],
        auth: AuthContext,
        clear: Iterable[str] = (),
    ) -> Employee:
        """
        Merge a partial update.

        Args:
            clear: Fields explicitly reset, e.g. ("team",) to empty a team
        """
        stored = await self.get_employee(role, employee_id)
        ensure(can_modify_employee(auth, stored.email), auth, f"modify {ROLE_LABELS[role].lower()}")
        self._reject_foreign_fields(role, patch)

        updated = MergeUpdater(validator_for(role)).apply(stored, patch, clear=clear)
        if has_department(role) and updated.department_id != stored.department_id:
            await self._departments.require(updated.department_id, auth=auth)
        if role == Role.TEAM_MANAGER and updated.team != stored.team:
            await self._require_doctors(updated.team)
        if patch.get("password"):
            updated = merge(updated, {"password": hash_password(patch["password"])})
        return await self._persist(updated, action="update")

    async def set_enabled(self, role: Role, employee_id: int, enabled: bool, auth: AuthContext) -> Employee:
        stored = await self.get_employee(role, employee_id)
        ensure(can_modify_employee(auth, stored.email), auth, f"change {ROLE_LABELS[role].lower()} status")
        updated = MergeUpdater(validator_for(role)).apply(stored, {"enabled": enabled})
        return await self._persist(updated, action="status")

    async def delete(self, role: Role, employee_id: int) -> None:
        """Delete an employee; a doctor is first removed from every team."""
        await self.get_employee(role, employee_id)

        async def delete() -> None:
            await self._repository.delete(employee_id)
            await self._repository.commit()

        if role == Role.DOCTOR:
            actions = await self._cascade.delete(
                employee_id, delete, conflict_message="Remove this doctor from all teams first"
            )
            logger.info(f"Doctor deleted: {employee_id} (removed from {actions[0].count} team(s))")
            return

        await self._guard.run(delete, action="delete", target=employee_id)
        logger.info(f"{ROLE_LABELS[role]} deleted: {employee_id}")

    async def _require_doctors(self, doctor_ids: Iterable[int]) -> None:
        wanted = set(doctor_ids)
        if not wanted:
            return
        found = await self._guard.run(
            lambda: self._repository.find_by_ids(wanted, Role.DOCTOR), action="check team"
        )
        missing = sorted(wanted - {doctor.id for doctor in found})
        if missing:
            raise ValidationException(f"Such a doctor does not exist: {missing[0]}", field="team")

    @staticmethod
    def _reject_foreign_fields(role: Role, values: Mapping[str, Any]) -> None:
        for name in sorted(foreign_role_fields(role)):
            if values.get(name):
                raise ValidationException(f"{name} does not apply to {ROLE_LABELS[role].lower()}", field=name)

    @staticmethod
    def _remove_from_team(manager: Employee, doctor_id: int) -> Employee:
        return merge(manager, {"team": manager.team - {doctor_id}}, clear=("team",))

    async def _persist(self, employee: Employee, action: str) -> Employee:
        async def save() -> Employee:
            saved = await self._repository.save(employee)
            await self._repository.commit()
            return saved

        return await self._guard.run(
            save,
            action=action,
            target=employee.id,
            conflict_message=f"Such an employee already exists: {employee.email}",
        )
