from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ErrorResponse(BaseModel):
    timestamp: str
    status: int
    error: str
    path: str


class AddressSchema(CamelModel):
    country: str | None = None
    state: str | None = None
    city: str | None = None
    street: str | None = None
    house_number: int | None = None
