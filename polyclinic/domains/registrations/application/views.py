"""
Composed views of duties and registrations.

Local fields plus snapshots resolved from the employee and client services.
A snapshot that could not be resolved is None; the IDs are always present.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, NamedTuple

from polyclinic.api.schemas import CamelModel
from polyclinic.core.composition.snapshots import ClientSnapshot, DoctorSnapshot, DutySnapshot
from polyclinic.domains.registrations.domain import Duty, Registration


def duty_snapshot(duty: Duty | None) -> DutySnapshot | None:
    if duty is None:
        return None
    return DutySnapshot(
        id=duty.id,
        name=duty.name,
        description=duty.description,
        needed_specialty=duty.needed_specialty,
        price=duty.price,
    )


class DutyView(CamelModel):
    id: int
    name: str | None = None
    description: str | None = None
    needed_specialty: str | None = None
    price: Decimal | None = None
    doctors: list[DoctorSnapshot] | None = None

    @classmethod
    def compose(cls, duty: Duty, resolved: dict[str, Any]) -> "DutyView":
        return cls(
            id=duty.id,
            name=duty.name,
            description=duty.description,
            needed_specialty=duty.needed_specialty,
            price=duty.price,
            doctors=resolved.get("doctors"),
        )


class BookedRegistration(NamedTuple):
    """A registration with its local duty already loaded."""

    registration: Registration
    duty: Duty | None


class RegistrationView(CamelModel):
    id: int
    date: datetime | None = None
    is_active: bool
    duty_id: int | None = None
    doctor_id: int | None = None
    client_id: int | None = None
    duty: DutySnapshot | None = None
    doctor: DoctorSnapshot | None = None
    client: ClientSnapshot | None = None

    @classmethod
    def compose(cls, booked: BookedRegistration, resolved: dict[str, Any]) -> "RegistrationView":
        registration = booked.registration
        return cls(
            id=registration.id,
            date=registration.date,
            is_active=registration.is_active,
            duty_id=registration.duty_id,
            doctor_id=registration.doctor_id,
            client_id=registration.client_id,
            duty=duty_snapshot(booked.duty),
            doctor=resolved.get("doctor"),
            client=resolved.get("client"),
        )
