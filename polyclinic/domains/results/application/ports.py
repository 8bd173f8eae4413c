"""
Result Repository Interface
"""

from typing import Protocol, runtime_checkable

from polyclinic.domains.results.domain import Result


@runtime_checkable
class IResultRepository(Protocol):
    async def find_all(self, doctor_id: int | None = None, client_id: int | None = None) -> list[Result]:
        ...

    async def find_by_id(self, result_id: int) -> Result | None:
        ...

    async def save(self, result: Result) -> Result:
        ...

    async def delete(self, result_id: int) -> bool:
        ...

    async def commit(self) -> None:
        ...


__all__ = ["IResultRepository"]
