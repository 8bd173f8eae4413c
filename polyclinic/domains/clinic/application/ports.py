"""
Clinic Repository Interfaces

Protocol definitions for department, facility and link data access.
"""

from typing import Protocol, runtime_checkable

from polyclinic.domains.clinic.domain import Department, DepartmentFacilityIndex, MedicalFacility


@runtime_checkable
class IDepartmentRepository(Protocol):
    """Departments; `facility_ids` is read from the association, never written here."""

    async def find_all(self) -> list[Department]:
        ...

    async def find_by_id(self, department_id: int) -> Department | None:
        ...

    async def find_by_facility(self, facility_id: int) -> list[Department]:
        ...

    async def save(self, department: Department) -> Department:
        ...

    async def delete(self, department_id: int) -> bool:
        ...

    async def commit(self) -> None:
        ...


@runtime_checkable
class IFacilityRepository(Protocol):
    """Facilities; `department_ids` is read from the association, never written here."""

    async def find_all(self) -> list[MedicalFacility]:
        ...

    async def find_by_id(self, facility_id: int) -> MedicalFacility | None:
        ...

    async def find_by_department(self, department_id: int) -> list[MedicalFacility]:
        ...

    async def save(self, facility: MedicalFacility) -> MedicalFacility:
        ...

    async def delete(self, facility_id: int) -> bool:
        ...

    async def commit(self) -> None:
        ...


@runtime_checkable
class ILinkRepository(Protocol):
    """The department/facility association."""

    async def load_index(
        self,
        department_ids: frozenset[int] = frozenset(),
        facility_ids: frozenset[int] = frozenset(),
    ) -> DepartmentFacilityIndex:
        """Load every link touching the given departments or facilities."""
        ...

    async def save_index(self, index: DepartmentFacilityIndex) -> None:
        """Write the pending links and unlinks of an index."""
        ...


__all__ = ["IDepartmentRepository", "IFacilityRepository", "ILinkRepository"]
