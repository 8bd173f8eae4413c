"""
Client API Schemas

Request bodies accept partial documents: constraint checks run in the
service so every violation is reported together.
"""

from polyclinic.api.schemas import CamelModel
from polyclinic.core.domain import Sex


class ClientBase(CamelModel):
    email: str | None = None
    name: str | None = None
    sex: Sex | None = None
    phone_number: str | None = None
    country: str | None = None
    city: str | None = None
    street: str | None = None
    house_number: int | None = None


class ClientCreate(ClientBase):
    password: str | None = None
    enabled: bool = True


class ClientPatch(ClientBase):
    password: str | None = None


class ClientResponse(ClientBase):
    id: int
    enabled: bool
