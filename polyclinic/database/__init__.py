from polyclinic.database.async_db import (
    create_database_engine,
    create_session_factory,
    dispose_engine,
    get_async_db,
    get_engine,
    get_session_factory,
    init_models,
)
from polyclinic.database.base import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "create_database_engine",
    "create_session_factory",
    "dispose_engine",
    "get_async_db",
    "get_engine",
    "get_session_factory",
    "init_models",
]
