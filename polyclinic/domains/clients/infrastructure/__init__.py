from polyclinic.domains.clients.infrastructure.models import ClientModel
from polyclinic.domains.clients.infrastructure.repository import SQLAlchemyClientRepository

__all__ = ["ClientModel", "SQLAlchemyClientRepository"]
