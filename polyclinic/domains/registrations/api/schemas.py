"""
Registration API Schemas

Responses of registrations and duty reads are the composed views; see
application/views.py.
"""

from datetime import datetime
from decimal import Decimal

from polyclinic.api.schemas import CamelModel


class DutyRequest(CamelModel):
    name: str | None = None
    description: str | None = None
    needed_specialty: str | None = None
    price: Decimal | None = None


class DutyResponse(DutyRequest):
    id: int


class RegistrationRequest(CamelModel):
    duty_id: int | None = None
    date: datetime | None = None
    doctor_id: int | None = None
    client_id: int | None = None


class RegistrationCreate(RegistrationRequest):
    is_active: bool = True
