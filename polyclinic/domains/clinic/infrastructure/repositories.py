"""
Clinic Repository Implementations

SQLAlchemy implementations of the department, facility and link ports.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import delete, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from polyclinic.core.domain import Address
from polyclinic.domains.clinic.application.ports import (
    IDepartmentRepository,
    IFacilityRepository,
    ILinkRepository,
)
from polyclinic.domains.clinic.domain import Department, DepartmentFacilityIndex, MedicalFacility
from polyclinic.domains.clinic.infrastructure.models import DepartmentModel, FacilityModel, department_facility

logger = logging.getLogger(__name__)


async def _linked_ids(session: AsyncSession, key_column, value_column, keys: Iterable[int]) -> dict[int, set[int]]:
    keys = list(keys)
    links: dict[int, set[int]] = defaultdict(set)
    if not keys:
        return links
    result = await session.execute(select(key_column, value_column).where(key_column.in_(keys)))
    for key, value in result.all():
        links[key].add(value)
    return links


class SQLAlchemyDepartmentRepository(IDepartmentRepository):
    """SQLAlchemy implementation of department repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> list[Department]:
        result = await self.session.execute(select(DepartmentModel).order_by(DepartmentModel.id))
        return await self._to_entities(result.scalars().all())

    async def find_by_id(self, department_id: int) -> Department | None:
        model = await self.session.get(DepartmentModel, department_id)
        if model is None:
            return None
        return (await self._to_entities([model]))[0]

    async def find_by_facility(self, facility_id: int) -> list[Department]:
        result = await self.session.execute(
            select(DepartmentModel)
            .join(department_facility, department_facility.c.department_id == DepartmentModel.id)
            .where(department_facility.c.facility_id == facility_id)
            .order_by(DepartmentModel.id)
        )
        return await self._to_entities(result.scalars().all())

    async def save(self, department: Department) -> Department:
        model = await self.session.get(DepartmentModel, department.id) if department.id else None
        if model is None:
            model = DepartmentModel()
            self.session.add(model)
        address = department.address or Address()
        model.country = address.country
        model.state = address.state
        model.city = address.city
        model.street = address.street
        model.house_number = address.house_number
        await self.session.flush()
        await self.session.refresh(model)
        return (await self._to_entities([model]))[0]

    async def delete(self, department_id: int) -> bool:
        model = await self.session.get(DepartmentModel, department_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def commit(self) -> None:
        await self.session.commit()

    async def _to_entities(self, models: Iterable[DepartmentModel]) -> list[Department]:
        models = list(models)
        links = await _linked_ids(
            self.session, department_facility.c.department_id, department_facility.c.facility_id, [m.id for m in models]
        )
        return [
            Department(
                id=model.id,
                address=Address(
                    country=model.country,
                    state=model.state,
                    city=model.city,
                    street=model.street,
                    house_number=model.house_number,
                ),
                facility_ids=frozenset(links.get(model.id, ())),
            )
            for model in models
        ]


class SQLAlchemyFacilityRepository(IFacilityRepository):
    """SQLAlchemy implementation of facility repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> list[MedicalFacility]:
        result = await self.session.execute(select(FacilityModel).order_by(FacilityModel.id))
        return await self._to_entities(result.scalars().all())

    async def find_by_id(self, facility_id: int) -> MedicalFacility | None:
        model = await self.session.get(FacilityModel, facility_id)
        if model is None:
            return None
        return (await self._to_entities([model]))[0]

    async def find_by_department(self, department_id: int) -> list[MedicalFacility]:
        result = await self.session.execute(
            select(FacilityModel)
            .join(department_facility, department_facility.c.facility_id == FacilityModel.id)
            .where(department_facility.c.department_id == department_id)
            .order_by(FacilityModel.id)
        )
        return await self._to_entities(result.scalars().all())

    async def save(self, facility: MedicalFacility) -> MedicalFacility:
        model = await self.session.get(FacilityModel, facility.id) if facility.id else None
        if model is None:
            model = FacilityModel()
            self.session.add(model)
        model.name = facility.name
        await self.session.flush()
        await self.session.refresh(model)
        return (await self._to_entities([model]))[0]

    async def delete(self, facility_id: int) -> bool:
        model = await self.session.get(FacilityModel, facility_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def commit(self) -> None:
        await self.session.commit()

    async def _to_entities(self, models: Iterable[FacilityModel]) -> list[MedicalFacility]:
        models = list(models)
        links = await _linked_ids(
            self.session, department_facility.c.facility_id, department_facility.c.department_id, [m.id for m in models]
        )
        return [
            MedicalFacility(id=model.id, name=model.name, department_ids=frozenset(links.get(model.id, ())))
            for model in models
        ]


class SQLAlchemyLinkRepository(ILinkRepository):
    """Association rows between departments and facilities."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load_index(
        self,
        department_ids: frozenset[int] = frozenset(),
        facility_ids: frozenset[int] = frozenset(),
    ) -> DepartmentFacilityIndex:
        conditions = []
        if department_ids:
            conditions.append(department_facility.c.department_id.in_(department_ids))
        if facility_ids:
            conditions.append(department_facility.c.facility_id.in_(facility_ids))
        if not conditions:
            return DepartmentFacilityIndex()
        result = await self.session.execute(
            select(department_facility.c.department_id, department_facility.c.facility_id).where(or_(*conditions))
        )
        return DepartmentFacilityIndex(tuple(row) for row in result.all())

    async def save_index(self, index: DepartmentFacilityIndex) -> None:
        for department_id, facility_id in index.pending_unlinks():
            await self.session.execute(
                delete(department_facility).where(
                    department_facility.c.department_id == department_id,
                    department_facility.c.facility_id == facility_id,
                )
            )
        links = [
            {"department_id": department_id, "facility_id": facility_id}
            for department_id, facility_id in index.pending_links()
        ]
        if links:
            await self.session.execute(insert(department_facility), links)
        await self.session.flush()
        logger.debug(f"Saved department/facility links: +{len(links)} -{len(index.pending_unlinks())}")
        index.mark_saved()
