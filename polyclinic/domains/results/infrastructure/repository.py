"""
Result Repository Implementation
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from polyclinic.domains.results.application.ports import IResultRepository
from polyclinic.domains.results.domain import Result
from polyclinic.domains.results.infrastructure.models import ResultModel


class SQLAlchemyResultRepository(IResultRepository):
    """SQLAlchemy implementation of result repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self, doctor_id: int | None = None, client_id: int | None = None) -> list[Result]:
        query = select(ResultModel)
        if doctor_id is not None:
            query = query.where(ResultModel.doctor_id == doctor_id)
        if client_id is not None:
            query = query.where(ResultModel.client_id == client_id)
        result = await self.session.execute(query.order_by(ResultModel.id))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_by_id(self, result_id: int) -> Result | None:
        model = await self.session.get(ResultModel, result_id)
        return self._to_entity(model) if model else None

    async def save(self, result: Result) -> Result:
        model = await self.session.get(ResultModel, result.id) if result.id else None
        if model is None:
            model = ResultModel()
            self.session.add(model)
        model.data = result.data
        model.duty_id = result.duty_id
        model.client_id = result.client_id
        model.doctor_id = result.doctor_id
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_entity(model)

    async def delete(self, result_id: int) -> bool:
        model = await self.session.get(ResultModel, result_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def commit(self) -> None:
        await self.session.commit()

    def _to_entity(self, model: ResultModel) -> Result:
        return Result(
            id=model.id,
            data=model.data,
            duty_id=model.duty_id,
            client_id=model.client_id,
            doctor_id=model.doctor_id,
        )
