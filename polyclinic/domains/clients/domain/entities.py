"""
Client Entity

A patient of the clinic. Owned by the client service and referenced by ID
from registrations and results.
"""

from dataclasses import dataclass

from polyclinic.core.domain import Entity, Sex
from polyclinic.core.validation import (
    ConstraintValidator,
    min_length,
    not_blank,
    not_null,
    positive,
    valid_email,
)


@dataclass(kw_only=True)
class Client(Entity[int]):
    email: str | None = None
    password: str | None = None
    name: str | None = None
    sex: Sex | None = None
    phone_number: str | None = None
    country: str | None = None
    city: str | None = None
    street: str | None = None
    house_number: int | None = None
    enabled: bool = True


client_validator: ConstraintValidator[Client] = ConstraintValidator(
    not_blank("email", "Email is mandatory"),
    valid_email("email", "Email must be valid"),
    not_blank("password", "Password is mandatory"),
    min_length("password", 8, "Password must be at least 8 characters long"),
    not_blank("name", "Name is mandatory"),
    not_null("sex", "Sex is mandatory"),
    not_blank("phone_number", "Phone number is mandatory"),
    not_blank("country", "Country is mandatory"),
    not_blank("city", "City is mandatory"),
    not_blank("street", "Street is mandatory"),
    not_null("house_number", "House number is mandatory"),
    positive("house_number", "House number must be positive"),
)
