"""
Registration Repository Implementations

SQLAlchemy implementations of IDutyRepository and IRegistrationRepository.
"""

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from polyclinic.domains.registrations.application.ports import IDutyRepository, IRegistrationRepository
from polyclinic.domains.registrations.domain import Duty, Registration
from polyclinic.domains.registrations.infrastructure.models import DutyModel, RegistrationModel

logger = logging.getLogger(__name__)


class SQLAlchemyDutyRepository(IDutyRepository):
    """SQLAlchemy implementation of duty repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self, needed_specialty: str | None = None) -> list[Duty]:
        query = select(DutyModel)
        if needed_specialty is not None:
            query = query.where(DutyModel.needed_specialty == needed_specialty)
        result = await self.session.execute(query.order_by(DutyModel.id))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_by_id(self, duty_id: int) -> Duty | None:
        model = await self.session.get(DutyModel, duty_id)
        return self._to_entity(model) if model else None

    async def find_by_ids(self, duty_ids: Iterable[int]) -> list[Duty]:
        ids = list(duty_ids)
        if not ids:
            return []
        result = await self.session.execute(select(DutyModel).where(DutyModel.id.in_(ids)))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def save(self, duty: Duty) -> Duty:
        model = await self.session.get(DutyModel, duty.id) if duty.id else None
        if model is None:
            model = DutyModel()
            self.session.add(model)
        model.name = duty.name
        model.description = duty.description
        model.needed_specialty = duty.needed_specialty
        model.price = duty.price
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_entity(model)

    async def delete(self, duty_id: int) -> bool:
        model = await self.session.get(DutyModel, duty_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def commit(self) -> None:
        await self.session.commit()

    def _to_entity(self, model: DutyModel) -> Duty:
        return Duty(
            id=model.id,
            name=model.name,
            description=model.description,
            needed_specialty=model.needed_specialty,
            price=model.price,
        )


class SQLAlchemyRegistrationRepository(IRegistrationRepository):
    """SQLAlchemy implementation of registration repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self, doctor_id: int | None = None, client_id: int | None = None) -> list[Registration]:
        query = select(RegistrationModel)
        if doctor_id is not None:
            query = query.where(RegistrationModel.doctor_id == doctor_id)
        if client_id is not None:
            query = query.where(RegistrationModel.client_id == client_id)
        result = await self.session.execute(query.order_by(RegistrationModel.date, RegistrationModel.id))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_by_id(self, registration_id: int) -> Registration | None:
        model = await self.session.get(RegistrationModel, registration_id)
        return self._to_entity(model) if model else None

    async def find_by_duty(self, duty_id: int) -> list[Registration]:
        result = await self.session.execute(
            select(RegistrationModel).where(RegistrationModel.duty_id == duty_id).order_by(RegistrationModel.id)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def save(self, registration: Registration) -> Registration:
        model = await self.session.get(RegistrationModel, registration.id) if registration.id else None
        if model is None:
            model = RegistrationModel()
            self.session.add(model)
        self._update_model(model, registration)
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_entity(model)

    async def save_all(self, registrations: Sequence[Registration]) -> list[Registration]:
        return [await self.save(registration) for registration in registrations]

    async def delete(self, registration_id: int) -> bool:
        model = await self.session.get(RegistrationModel, registration_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def commit(self) -> None:
        await self.session.commit()

    def _to_entity(self, model: RegistrationModel) -> Registration:
        return Registration(
            id=model.id,
            duty_id=model.duty_id,
            date=model.date,
            doctor_id=model.doctor_id,
            client_id=model.client_id,
            is_active=model.is_active,
        )

    def _update_model(self, model: RegistrationModel, registration: Registration) -> None:
        model.duty_id = registration.duty_id
        model.date = registration.date
        model.doctor_id = registration.doctor_id
        model.client_id = registration.client_id
        model.is_active = registration.is_active
