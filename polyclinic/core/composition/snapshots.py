"""
Snapshots of foreign-owned entities.

Read-only copies of a peer's canonical JSON, rebuilt on every read and never
persisted. Unknown fields are ignored so a peer can grow its contract.
"""

from datetime import date
from decimal import Decimal
from typing import ClassVar, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Snapshot(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    id: int


class PersonSnapshot(Snapshot):
    """Snapshot of a person; contact details are private to the person and top managers."""

    PRIVATE_FIELDS: ClassVar[tuple[str, ...]] = ()

    email: str | None = None

    def redacted(self) -> Self:
        return self.model_copy(update={name: None for name in self.PRIVATE_FIELDS})


class AddressSnapshot(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    country: str | None = None
    state: str | None = None
    city: str | None = None
    street: str | None = None
    house_number: int | None = None


class PersonalDataSnapshot(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    name: str | None = None
    phone: str | None = None
    salary: Decimal | None = None
    hire_date: date | None = None
    date_of_birth: date | None = None
    sex: str | None = None
    address: AddressSnapshot | None = None


class ClientSnapshot(PersonSnapshot):
    PRIVATE_FIELDS: ClassVar[tuple[str, ...]] = ("phone_number", "country", "city", "street", "house_number")

    name: str | None = None
    sex: str | None = None
    phone_number: str | None = None
    country: str | None = None
    city: str | None = None
    street: str | None = None
    house_number: int | None = None
    enabled: bool | None = None


class DoctorSnapshot(PersonSnapshot):
    department_id: int | None = None
    specialty: str | None = None
    practice_beginning_date: date | None = None
    personal_data: PersonalDataSnapshot | None = None
    enabled: bool | None = None

    def redacted(self) -> Self:
        if self.personal_data is None:
            return self
        public = PersonalDataSnapshot(name=self.personal_data.name, sex=self.personal_data.sex)
        return self.model_copy(update={"personal_data": public})


class DutySnapshot(Snapshot):
    name: str | None = None
    description: str | None = None
    needed_specialty: str | None = None
    price: Decimal | None = None


class DepartmentSnapshot(Snapshot):
    address: AddressSnapshot | None = None
    facility_ids: list[int] = []
