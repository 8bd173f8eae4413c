"""
Result Entity

Every reference of a result is foreign: the duty lives at the registration
service, doctor and client at their own services.
"""

from dataclasses import dataclass

from polyclinic.core.domain import Entity
from polyclinic.core.validation import ConstraintValidator, not_blank


@dataclass(kw_only=True)
class Result(Entity[int]):
    data: str | None = None
    duty_id: int | None = None
    client_id: int | None = None
    doctor_id: int | None = None


result_validator: ConstraintValidator[Result] = ConstraintValidator(
    not_blank("data", "Data is mandatory"),
)
