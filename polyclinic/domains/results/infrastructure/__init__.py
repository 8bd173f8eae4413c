from polyclinic.domains.results.infrastructure.models import ResultModel
from polyclinic.domains.results.infrastructure.repository import SQLAlchemyResultRepository

__all__ = ["ResultModel", "SQLAlchemyResultRepository"]
