"""
Registration Repository Interfaces
"""

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from polyclinic.domains.registrations.domain import Duty, Registration


@runtime_checkable
class IDutyRepository(Protocol):
    async def find_all(self, needed_specialty: str | None = None) -> list[Duty]:
        ...

    async def find_by_id(self, duty_id: int) -> Duty | None:
        ...

    async def find_by_ids(self, duty_ids: Iterable[int]) -> list[Duty]:
        ...

    async def save(self, duty: Duty) -> Duty:
        ...

    async def delete(self, duty_id: int) -> bool:
        ...

    async def commit(self) -> None:
        ...


@runtime_checkable
class IRegistrationRepository(Protocol):
    async def find_all(self, doctor_id: int | None = None, client_id: int | None = None) -> list[Registration]:
        ...

    async def find_by_id(self, registration_id: int) -> Registration | None:
        ...

    async def find_by_duty(self, duty_id: int) -> list[Registration]:
        ...

    async def save(self, registration: Registration) -> Registration:
        ...

    async def save_all(self, registrations: Sequence[Registration]) -> list[Registration]:
        ...

    async def delete(self, registration_id: int) -> bool:
        ...

    async def commit(self) -> None:
        ...


__all__ = ["IDutyRepository", "IRegistrationRepository"]
