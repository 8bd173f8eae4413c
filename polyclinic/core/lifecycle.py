"""
Application lifecycle using the FastAPI lifespan pattern.

Startup builds the service container (breakers, peer clients) and, outside
production, creates missing tables. Shutdown closes peer clients and disposes
the engine.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from polyclinic.core.container import ServiceContainer
from polyclinic.database import dispose_engine, get_engine, init_models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    container: ServiceContainer = app.state.container
    settings = container.settings
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT}): {', '.join(settings.ENABLED_SERVICES)}")

    engine = get_engine(settings)
    if settings.ENVIRONMENT != "production":
        await init_models(engine)

    try:
        yield
    finally:
        await container.close()
        await dispose_engine()
        logger.info("Application shutdown completed")
