"""
Employee Repository Interface
"""

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from polyclinic.domains.employees.domain import Employee, Role


@runtime_checkable
class IEmployeeRepository(Protocol):
    """Employees of every role in one store; reads are always scoped to a role."""

    async def find_all(
        self,
        role: Role,
        department_id: int | None = None,
        specialty: str | None = None,
        email: str | None = None,
    ) -> list[Employee]:
        ...

    async def find_by_id(self, employee_id: int, role: Role) -> Employee | None:
        ...

    async def find_by_ids(self, employee_ids: Iterable[int], role: Role) -> list[Employee]:
        ...

    async def find_teams_with(self, doctor_id: int) -> list[Employee]:
        """Team managers whose team contains the doctor."""
        ...

    async def save(self, employee: Employee) -> Employee:
        ...

    async def save_all(self, employees: Sequence[Employee]) -> list[Employee]:
        ...

    async def delete(self, employee_id: int) -> bool:
        ...

    async def commit(self) -> None:
        ...


__all__ = ["IEmployeeRepository"]
