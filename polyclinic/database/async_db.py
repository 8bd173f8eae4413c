import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from polyclinic.config.settings import Settings, get_settings
from polyclinic.database.base import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_database_engine(settings: Settings) -> AsyncEngine:
    """Crea el engine de base de datos asíncrono."""
    try:
        if settings.is_sqlite:
            # In-memory databases must share one connection across sessions.
            engine = create_async_engine(
                settings.DATABASE_URL,
                echo=settings.DB_ECHO,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        else:
            engine = create_async_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, pool_pre_ping=True)
        logger.info(f"Async database engine created ({engine.url.get_backend_name()})")
        return engine
    except Exception as e:
        logger.error(f"Failed to create async database engine: {e}")
        raise


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Process-wide engine, created from `settings` (or the defaults) on first use."""
    global _engine
    if _engine is None:
        _engine = create_database_engine(settings or get_settings())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def init_models(engine: AsyncEngine | None = None) -> None:
    """Create missing tables (development and tests; production uses migrations)."""
    import polyclinic.domains.models  # noqa: F401  registers every table on Base

    async with (engine or get_engine()).begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Async database engine disposed")
    _engine = None
    _session_factory = None


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency que entrega una sesión por request.

    Services commit through their store guard; anything left open is
    committed here, and any error rolls the transaction back.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Async database error: {e}")
            await session.rollback()
            raise
