from polyclinic.domains.results.domain.entities import Result, result_validator

__all__ = ["Result", "result_validator"]
