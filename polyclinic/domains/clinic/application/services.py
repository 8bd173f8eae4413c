"""
Clinic Services

Departments and medical facilities. A facility must belong to at least one
department; the links between both live in the DepartmentFacilityIndex.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from polyclinic.core.domain import EntityNotFoundException, ValidationException
from polyclinic.core.persistence import CascadeCoordinator, CascadeRule, MergeUpdater, StoreGuard, merge
from polyclinic.domains.clinic.application.ports import (
    IDepartmentRepository,
    IFacilityRepository,
    ILinkRepository,
)
from polyclinic.domains.clinic.domain import (
    Department,
    MedicalFacility,
    department_validator,
    facility_validator,
)

logger = logging.getLogger(__name__)

DEPARTMENT_IN_USE = "Delete all doctors and facilities related to this department first"


class DepartmentService:
    """Use cases over departments."""

    def __init__(self, repository: IDepartmentRepository, guard: StoreGuard):
        self._repository = repository
        self._guard = guard
        self._updater = MergeUpdater(department_validator)

    async def list_departments(self, facility_id: int | None = None) -> list[Department]:
        if facility_id is not None:
            return await self._guard.run(
                lambda: self._repository.find_by_facility(facility_id), action="list", target=facility_id
            )
        return await self._guard.run(self._repository.find_all, action="list")

    async def get_department(self, department_id: int) -> Department:
        department = await self._guard.run(
            lambda: self._repository.find_by_id(department_id), action="get", target=department_id
        )
        if department is None:
            raise EntityNotFoundException("Department", department_id)
        return department

    async def create(self, department: Department) -> Department:
        department_validator.check(department)
        saved = await self._persist(department, action="create")
        logger.info(f"Department created: {saved.id}")
        return saved

    async def update(self, department_id: int, patch: Mapping[str, Any]) -> Department:
        stored = await self.get_department(department_id)
        return await self._persist(self._updater.apply(stored, patch), action="update")

    async def delete(self, department_id: int) -> None:
        """
        Raises:
            EntityNotFoundException: Unknown department
            ConflictException: Facilities still linked to it
        """
        await self.get_department(department_id)

        async def delete() -> None:
            await self._repository.delete(department_id)
            await self._repository.commit()

        await self._guard.run(delete, action="delete", target=department_id, conflict_message=DEPARTMENT_IN_USE)
        logger.info(f"Department deleted: {department_id}")

    async def _persist(self, department: Department, action: str) -> Department:
        async def save() -> Department:
            saved = await self._repository.save(department)
            await self._repository.commit()
            return saved

        return await self._guard.run(save, action=action, target=department.id)


class FacilityService:
    """Use cases over medical facilities and their department links."""

    def __init__(
        self,
        repository: IFacilityRepository,
        departments: IDepartmentRepository,
        links: ILinkRepository,
        guard: StoreGuard,
    ):
        self._repository = repository
        self._departments = departments
        self._links = links
        self._guard = guard
        self._updater = MergeUpdater(facility_validator)
        self._cascade = CascadeCoordinator(
            guard,
            [
                CascadeRule(
                    name="department.facility_ids",
                    find_dependents=self._departments.find_by_facility,
                    detach=self._detach_department,
                    persist=self._persist_detached,
                )
            ],
        )

    async def list_facilities(self, department_id: int | None = None) -> list[MedicalFacility]:
        if department_id is not None:
            return await self._guard.run(
                lambda: self._repository.find_by_department(department_id), action="list", target=department_id
            )
        return await self._guard.run(self._repository.find_all, action="list")

    async def get_facility(self, facility_id: int) -> MedicalFacility:
        facility = await self._guard.run(
            lambda: self._repository.find_by_id(facility_id), action="get", target=facility_id
        )
        if facility is None:
            raise EntityNotFoundException("Facility", facility_id)
        return facility

    async def create(self, facility: MedicalFacility) -> MedicalFacility:
        """
        Raises:
            ValidationException: Constraint violations or unknown departments
            ConflictException: Name already taken
        """
        facility_validator.check(facility)
        await self._require_departments(facility.department_ids)
        saved = await self._persist(facility, action="create")
        logger.info(f"Facility created: {saved.id} in departments {sorted(saved.department_ids)}")
        return saved

    async def update(self, facility_id: int, patch: Mapping[str, Any]) -> MedicalFacility:
        stored = await self.get_facility(facility_id)
        updated = self._updater.apply(stored, patch)
        if updated.department_ids != stored.department_ids:
            await self._require_departments(updated.department_ids)
        return await self._persist(updated, action="update")

    async def unlink_department(self, facility_id: int, department_id: int) -> MedicalFacility:
        """Remove one department from a facility; the last one cannot go."""
        stored = await self.get_facility(facility_id)
        if department_id not in stored.department_ids:
            raise EntityNotFoundException(
                "Department", department_id, message=f"No department with id {department_id} in facility {facility_id}"
            )
        remaining = stored.department_ids - {department_id}
        updated = self._updater.apply(stored, {"department_ids": remaining}, clear=("department_ids",))
        return await self._persist(updated, action="unlink")

    async def delete(self, facility_id: int) -> None:
        """Unlink the facility from its departments, then delete it."""
        await self.get_facility(facility_id)

        async def delete() -> None:
            await self._repository.delete(facility_id)
            await self._repository.commit()

        actions = await self._cascade.delete(
            facility_id, delete, conflict_message="Delete all links of this facility first"
        )
        logger.info(f"Facility deleted: {facility_id} ({sum(a.count for a in actions)} department link(s) cleared)")

    async def _require_departments(self, department_ids: frozenset[int]) -> None:
        for department_id in sorted(department_ids):
            department = await self._guard.run(
                lambda department_id=department_id: self._departments.find_by_id(department_id),
                action="check department",
                target=department_id,
            )
            if department is None:
                raise ValidationException(f"no department with id {department_id}", field="department_ids")

    async def _persist(self, facility: MedicalFacility, action: str) -> MedicalFacility:
        async def save() -> MedicalFacility:
            saved = await self._repository.save(facility)
            index = await self._links.load_index(facility_ids=frozenset({saved.id}))
            index.set_departments(saved.id, facility.department_ids)
            await self._links.save_index(index)
            await self._repository.commit()
            return merge(saved, {"department_ids": index.departments_of(saved.id)})

        return await self._guard.run(
            save,
            action=action,
            target=facility.id,
            conflict_message=f"Such a facility already exists: {facility.name}",
        )

    @staticmethod
    def _detach_department(department: Department, facility_id: int) -> Department:
        remaining = department.facility_ids - {facility_id}
        return merge(department, {"facility_ids": remaining}, clear=("facility_ids",))

    async def _persist_detached(self, departments: Sequence[Department]) -> None:
        index = await self._links.load_index(department_ids=frozenset(d.id for d in departments))
        for department in departments:
            index.set_facilities(department.id, department.facility_ids)
        await self._links.save_index(index)
