"""
Client Repository Implementation

SQLAlchemy implementation of IClientRepository.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from polyclinic.domains.clients.application.ports import IClientRepository
from polyclinic.domains.clients.domain import Client
from polyclinic.domains.clients.infrastructure.models import ClientModel

logger = logging.getLogger(__name__)


class SQLAlchemyClientRepository(IClientRepository):
    """SQLAlchemy implementation of client repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> list[Client]:
        result = await self.session.execute(select(ClientModel).order_by(ClientModel.id))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_by_id(self, client_id: int) -> Client | None:
        model = await self.session.get(ClientModel, client_id)
        return self._to_entity(model) if model else None

    async def find_by_email(self, email: str) -> Client | None:
        result = await self.session.execute(select(ClientModel).where(ClientModel.email == email))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def save(self, client: Client) -> Client:
        model = await self.session.get(ClientModel, client.id) if client.id else None
        if model is None:
            model = ClientModel()
            self.session.add(model)
        self._update_model(model, client)
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_entity(model)

    async def delete(self, client_id: int) -> bool:
        model = await self.session.get(ClientModel, client_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def commit(self) -> None:
        await self.session.commit()

    def _update_model(self, model: ClientModel, client: Client) -> None:
        model.email = client.email
        model.password = client.password
        model.name = client.name
        model.sex = client.sex
        model.phone_number = client.phone_number
        model.country = client.country
        model.city = client.city
        model.street = client.street
        model.house_number = client.house_number
        model.enabled = client.enabled

    def _to_entity(self, model: ClientModel) -> Client:
        return Client(
            id=model.id,
            email=model.email,
            password=model.password,
            name=model.name,
            sex=model.sex,
            phone_number=model.phone_number,
            country=model.country,
            city=model.city,
            street=model.street,
            house_number=model.house_number,
            enabled=model.enabled,
        )
