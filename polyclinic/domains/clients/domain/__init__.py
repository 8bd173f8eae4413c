from polyclinic.domains.clients.domain.entities import Client, client_validator

__all__ = ["Client", "client_validator"]
