from polyclinic.core.remote.foreign_keys import ForeignKeyChecker
from polyclinic.core.remote.peer_client import (
    PeerClient,
    PeerError,
    PeerNotFoundError,
    PeerUnavailableError,
)
from polyclinic.core.remote.resolver import RemoteResolver

__all__ = [
    "ForeignKeyChecker",
    "PeerClient",
    "PeerError",
    "PeerNotFoundError",
    "PeerUnavailableError",
    "RemoteResolver",
]
