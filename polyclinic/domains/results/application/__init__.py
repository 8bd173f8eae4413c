from polyclinic.domains.results.application.ports import IResultRepository
from polyclinic.domains.results.application.services import ResultService
from polyclinic.domains.results.application.views import ResultView

__all__ = ["IResultRepository", "ResultService", "ResultView"]
