"""
Registration Entities

A Duty is a service of the clinic's catalog. A Registration books a client
with a doctor for a duty; the duty is local, doctor and client are owned by
their own services.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from polyclinic.core.domain import Entity
from polyclinic.core.validation import ConstraintValidator, not_blank, not_null, positive


@dataclass(kw_only=True)
class Duty(Entity[int]):
    name: str | None = None
    description: str | None = None
    needed_specialty: str | None = None
    price: Decimal | None = None


@dataclass(kw_only=True)
class Registration(Entity[int]):
    duty_id: int | None = None
    date: datetime | None = None
    doctor_id: int | None = None
    client_id: int | None = None
    is_active: bool = True


duty_validator: ConstraintValidator[Duty] = ConstraintValidator(
    not_blank("name", "Name is mandatory"),
    not_blank("description", "Description is mandatory"),
    not_blank("needed_specialty", "Needed specialty is mandatory"),
    not_null("price", "Price is mandatory"),
    positive("price", "Price must be positive"),
)

# Doctor and client are checked at their owners; the duty may be cleared by
# a duty delete, so only new registrations must name one.
registration_validator: ConstraintValidator[Registration] = ConstraintValidator(
    not_null("date", "Date is mandatory"),
)
