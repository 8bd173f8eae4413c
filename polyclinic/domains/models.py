"""Every table of every service, imported so Base.metadata knows them."""

from polyclinic.domains.clients.infrastructure.models import ClientModel
from polyclinic.domains.clinic.infrastructure.models import DepartmentModel, FacilityModel, department_facility
from polyclinic.domains.employees.infrastructure.models import EmployeeModel, team_members
from polyclinic.domains.registrations.infrastructure.models import DutyModel, RegistrationModel
from polyclinic.domains.results.infrastructure.models import ResultModel

__all__ = [
    "ClientModel",
    "DepartmentModel",
    "DutyModel",
    "EmployeeModel",
    "FacilityModel",
    "RegistrationModel",
    "ResultModel",
    "department_facility",
    "team_members",
]
