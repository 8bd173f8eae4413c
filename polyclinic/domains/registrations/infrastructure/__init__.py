from polyclinic.domains.registrations.infrastructure.models import DutyModel, RegistrationModel
from polyclinic.domains.registrations.infrastructure.repositories import (
    SQLAlchemyDutyRepository,
    SQLAlchemyRegistrationRepository,
)

__all__ = [
    "DutyModel",
    "RegistrationModel",
    "SQLAlchemyDutyRepository",
    "SQLAlchemyRegistrationRepository",
]
