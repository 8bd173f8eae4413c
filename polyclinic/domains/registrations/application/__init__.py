from polyclinic.domains.registrations.application.ports import IDutyRepository, IRegistrationRepository
from polyclinic.domains.registrations.application.services import DutyService, RegistrationService
from polyclinic.domains.registrations.application.views import BookedRegistration, DutyView, RegistrationView

__all__ = [
    "BookedRegistration",
    "DutyService",
    "DutyView",
    "IDutyRepository",
    "IRegistrationRepository",
    "RegistrationService",
    "RegistrationView",
]
