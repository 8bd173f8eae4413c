from polyclinic.domains.clients.application.ports import IClientRepository
from polyclinic.domains.clients.application.services import ClientService

__all__ = ["ClientService", "IClientRepository"]
