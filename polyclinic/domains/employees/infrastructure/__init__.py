from polyclinic.domains.employees.infrastructure.models import EmployeeModel, team_members
from polyclinic.domains.employees.infrastructure.repository import SQLAlchemyEmployeeRepository

__all__ = ["EmployeeModel", "SQLAlchemyEmployeeRepository", "team_members"]
