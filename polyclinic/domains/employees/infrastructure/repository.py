"""
Employee Repository Implementation

SQLAlchemy implementation of IEmployeeRepository.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from polyclinic.core.domain import Address, Sex
from polyclinic.domains.employees.application.ports import IEmployeeRepository
from polyclinic.domains.employees.domain import Employee, PersonalData, Role
from polyclinic.domains.employees.infrastructure.models import EmployeeModel, team_members

logger = logging.getLogger(__name__)


class SQLAlchemyEmployeeRepository(IEmployeeRepository):
    """SQLAlchemy implementation of employee repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(
        self,
        role: Role,
        department_id: int | None = None,
        specialty: str | None = None,
        email: str | None = None,
    ) -> list[Employee]:
        query = select(EmployeeModel).where(EmployeeModel.role == role.value)
        if department_id is not None:
            query = query.where(EmployeeModel.department_id == department_id)
        if specialty is not None:
            query = query.where(EmployeeModel.specialty == specialty)
        if email is not None:
            query = query.where(EmployeeModel.email == email)
        result = await self.session.execute(query.order_by(EmployeeModel.id))
        return await self._to_entities(result.scalars().all())

    async def find_by_id(self, employee_id: int, role: Role) -> Employee | None:
        model = await self.session.get(EmployeeModel, employee_id)
        if model is None or model.role != role.value:
            return None
        return (await self._to_entities([model]))[0]

    async def find_by_ids(self, employee_ids: Iterable[int], role: Role) -> list[Employee]:
        ids = list(employee_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(EmployeeModel).where(EmployeeModel.id.in_(ids), EmployeeModel.role == role.value)
        )
        return await self._to_entities(result.scalars().all())

    async def find_teams_with(self, doctor_id: int) -> list[Employee]:
        result = await self.session.execute(
            select(EmployeeModel)
            .join(team_members, team_members.c.manager_id == EmployeeModel.id)
            .where(team_members.c.doctor_id == doctor_id)
            .order_by(EmployeeModel.id)
        )
        return await self._to_entities(result.scalars().all())

    async def save(self, employee: Employee) -> Employee:
        model = await self.session.get(EmployeeModel, employee.id) if employee.id else None
        if model is None:
            model = EmployeeModel()
            self.session.add(model)
        self._update_model(model, employee)
        await self.session.flush()

        if employee.role == Role.TEAM_MANAGER:
            await self._replace_team(model.id, employee.team)

        await self.session.refresh(model)
        return (await self._to_entities([model]))[0]

    async def save_all(self, employees: Sequence[Employee]) -> list[Employee]:
        return [await self.save(employee) for employee in employees]

    async def delete(self, employee_id: int) -> bool:
        model = await self.session.get(EmployeeModel, employee_id)
        if model is None:
            return False
        await self.session.execute(delete(team_members).where(team_members.c.manager_id == employee_id))
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def commit(self) -> None:
        await self.session.commit()

    async def _replace_team(self, manager_id: int, team: Iterable[int]) -> None:
        await self.session.execute(delete(team_members).where(team_members.c.manager_id == manager_id))
        rows = [{"manager_id": manager_id, "doctor_id": doctor_id} for doctor_id in sorted(team)]
        if rows:
            await self.session.execute(insert(team_members), rows)
        await self.session.flush()
        logger.debug(f"Team of manager {manager_id} set to {len(rows)} doctor(s)")

    async def _to_entities(self, models: Iterable[EmployeeModel]) -> list[Employee]:
        models = list(models)
        managers = [m.id for m in models if m.role == Role.TEAM_MANAGER.value]
        teams: dict[int, set[int]] = defaultdict(set)
        if managers:
            result = await self.session.execute(
                select(team_members.c.manager_id, team_members.c.doctor_id).where(
                    team_members.c.manager_id.in_(managers)
                )
            )
            for manager_id, doctor_id in result.all():
                teams[manager_id].add(doctor_id)
        return [self._to_entity(model, frozenset(teams.get(model.id, ()))) for model in models]

    def _to_entity(self, model: EmployeeModel, team: frozenset[int]) -> Employee:
        """Convert model to domain entity."""
        return Employee(
            id=model.id,
            role=Role(model.role),
            email=model.email,
            password=model.password,
            enabled=model.enabled,
            department_id=model.department_id,
            personal_data=PersonalData(
                name=model.name,
                phone=model.phone,
                salary=model.salary,
                hire_date=model.hire_date,
                date_of_birth=model.date_of_birth,
                sex=Sex(model.sex) if model.sex else None,
                address=Address(
                    country=model.country,
                    state=model.state,
                    city=model.city,
                    street=model.street,
                    house_number=model.house_number,
                ),
            ),
            specialty=model.specialty,
            practice_beginning_date=model.practice_beginning_date,
            team=team,
        )

    def _update_model(self, model: EmployeeModel, employee: Employee) -> None:
        """Update model fields from entity."""
        personal = employee.personal_data or PersonalData()
        address = personal.address or Address()

        model.role = employee.role.value
        model.email = employee.email
        model.password = employee.password
        model.enabled = employee.enabled
        model.department_id = employee.department_id
        model.name = personal.name
        model.phone = personal.phone
        model.salary = personal.salary
        model.hire_date = personal.hire_date
        model.date_of_birth = personal.date_of_birth
        model.sex = personal.sex.value if personal.sex else None
        model.country = address.country
        model.state = address.state
        model.city = address.city
        model.street = address.street
        model.house_number = address.house_number
        model.specialty = employee.specialty
        model.practice_beginning_date = employee.practice_beginning_date
