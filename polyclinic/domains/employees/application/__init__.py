from polyclinic.domains.employees.application.ports import IEmployeeRepository
from polyclinic.domains.employees.application.services import ROLE_LABELS, EmployeeService

__all__ = ["EmployeeService", "IEmployeeRepository", "ROLE_LABELS"]
