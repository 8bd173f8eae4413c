"""
Employee API Schemas

One request/response pair per role. Passwords are accepted, never returned.
"""

from datetime import date
from decimal import Decimal

from polyclinic.api.schemas import AddressSchema, CamelModel
from polyclinic.core.domain import Sex


class PersonalDataSchema(CamelModel):
    name: str | None = None
    phone: str | None = None
    salary: Decimal | None = None
    hire_date: date | None = None
    date_of_birth: date | None = None
    sex: Sex | None = None
    address: AddressSchema | None = None


class EmployeeRequest(CamelModel):
    email: str | None = None
    password: str | None = None
    personal_data: PersonalDataSchema | None = None


class EmployeeResponse(CamelModel):
    id: int
    email: str
    personal_data: PersonalDataSchema | None = None
    enabled: bool


# Doctors


class DoctorRequest(EmployeeRequest):
    department_id: int | None = None
    specialty: str | None = None
    practice_beginning_date: date | None = None


class DoctorResponse(EmployeeResponse):
    department_id: int | None = None
    specialty: str | None = None
    practice_beginning_date: date | None = None


# Team managers


class TeamManagerRequest(EmployeeRequest):
    department_id: int | None = None
    team: list[int] | None = None


class TeamManagerPatch(TeamManagerRequest):
    clear_team: bool = False


class TeamManagerResponse(EmployeeResponse):
    department_id: int | None = None
    team: list[int] = []


# Top managers


class TopManagerRequest(EmployeeRequest):
    pass


class TopManagerResponse(EmployeeResponse):
    pass
