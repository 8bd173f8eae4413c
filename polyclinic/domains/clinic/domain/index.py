"""
Department / Facility Index

The association between departments and facilities, held as two ID maps
that are always updated together. Changes are tracked so the store only
writes the pairs that moved.
"""

from collections import defaultdict
from collections.abc import Iterable


class DepartmentFacilityIndex:
    """
    Example:
        ```python
        index = DepartmentFacilityIndex([(1, 10), (2, 10)])
        index.set_departments(10, {2, 3})
        index.pending_links()    # {(3, 10)}
        index.pending_unlinks()  # {(1, 10)}
        ```
    """

    def __init__(self, links: Iterable[tuple[int, int]] = ()):
        self._facilities: dict[int, set[int]] = defaultdict(set)
        self._departments: dict[int, set[int]] = defaultdict(set)
        self._added: set[tuple[int, int]] = set()
        self._removed: set[tuple[int, int]] = set()
        for department_id, facility_id in links:
            self._facilities[department_id].add(facility_id)
            self._departments[facility_id].add(department_id)

    def facilities_of(self, department_id: int) -> frozenset[int]:
        return frozenset(self._facilities.get(department_id, ()))

    def departments_of(self, facility_id: int) -> frozenset[int]:
        return frozenset(self._departments.get(facility_id, ()))

    def link(self, department_id: int, facility_id: int) -> None:
        """Add the pair to both sides."""
        if facility_id in self._facilities[department_id]:
            return
        self._facilities[department_id].add(facility_id)
        self._departments[facility_id].add(department_id)
        pair = (department_id, facility_id)
        if pair in self._removed:
            self._removed.discard(pair)
        else:
            self._added.add(pair)

    def unlink(self, department_id: int, facility_id: int) -> None:
        """Remove the pair from both sides."""
        if facility_id not in self._facilities.get(department_id, ()):
            return
        self._facilities[department_id].discard(facility_id)
        self._departments[facility_id].discard(department_id)
        pair = (department_id, facility_id)
        if pair in self._added:
            self._added.discard(pair)
        else:
            self._removed.add(pair)

    def set_departments(self, facility_id: int, department_ids: Iterable[int]) -> None:
        """Make `department_ids` the exact department set of a facility."""
        wanted = set(department_ids)
        current = self.departments_of(facility_id)
        for department_id in current - wanted:
            self.unlink(department_id, facility_id)
        for department_id in wanted - current:
            self.link(department_id, facility_id)

    def set_facilities(self, department_id: int, facility_ids: Iterable[int]) -> None:
        """Make `facility_ids` the exact facility set of a department."""
        wanted = set(facility_ids)
        current = self.facilities_of(department_id)
        for facility_id in current - wanted:
            self.unlink(department_id, facility_id)
        for facility_id in wanted - current:
            self.link(department_id, facility_id)

    def remove_facility(self, facility_id: int) -> frozenset[int]:
        """Unlink a facility from every department, returning those departments."""
        departments = self.departments_of(facility_id)
        for department_id in departments:
            self.unlink(department_id, facility_id)
        return departments

    def pending_links(self) -> frozenset[tuple[int, int]]:
        return frozenset(self._added)

    def pending_unlinks(self) -> frozenset[tuple[int, int]]:
        return frozenset(self._removed)

    def mark_saved(self) -> None:
        self._added.clear()
        self._removed.clear()
