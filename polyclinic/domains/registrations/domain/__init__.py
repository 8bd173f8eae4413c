from polyclinic.domains.registrations.domain.entities import (
    Duty,
    Registration,
    duty_validator,
    registration_validator,
)

__all__ = ["Duty", "Registration", "duty_validator", "registration_validator"]
