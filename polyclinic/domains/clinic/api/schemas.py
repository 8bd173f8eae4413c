"""
Clinic API Schemas
"""

from polyclinic.api.schemas import AddressSchema, CamelModel


class DepartmentRequest(CamelModel):
    address: AddressSchema | None = None


class DepartmentResponse(CamelModel):
    id: int
    address: AddressSchema | None = None
    facility_ids: list[int] = []


class FacilityRequest(CamelModel):
    name: str | None = None
    department_ids: list[int] | None = None


class FacilityResponse(CamelModel):
    id: int
    name: str
    department_ids: list[int] = []
