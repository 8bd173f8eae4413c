"""
Application factory for FastAPI.

Builds one process serving the enabled services: middleware, exception
handlers, routers and the health endpoint with breaker status.
"""

import logging

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from polyclinic.api.exception_handlers import register_exception_handlers
from polyclinic.api.middleware import RequestLoggingMiddleware
from polyclinic.api.router import build_api_router
from polyclinic.config.settings import Settings, get_settings
from polyclinic.core.container import ServiceContainer
from polyclinic.core.lifecycle import lifespan

logger = logging.getLogger(__name__)


class AppFactory:
    """
    Factory for creating and configuring FastAPI applications.

    Each configuration step is handled by a dedicated method.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize app factory.

        Args:
            settings: Application settings (uses default if not provided)
            transport: Peer transport override, used by tests
        """
        self._settings = settings or get_settings()
        self._transport = transport

    def create_app(self) -> FastAPI:
        app = self._create_base_app()
        app.state.container = ServiceContainer(self._settings, transport=self._transport)

        self._configure_middleware(app)
        self._configure_exception_handlers(app)
        self._configure_routes(app)
        self._configure_health_endpoint(app)

        logger.info(f"Application created: {self._settings.PROJECT_NAME}")
        return app

    def _create_base_app(self) -> FastAPI:
        return FastAPI(
            title=self._settings.PROJECT_NAME,
            version=self._settings.VERSION,
            docs_url="/docs" if self._settings.DEBUG else None,
            redoc_url="/redoc" if self._settings.DEBUG else None,
            lifespan=lifespan,
        )

    def _configure_middleware(self, app: FastAPI) -> None:
        """
        Configure application middleware.

        Middleware order matters:
        1. CORS (outermost)
        2. Request logging
        """
        app.add_middleware(RequestLoggingMiddleware)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self._settings.DEBUG else [],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info("Middleware configured")

    def _configure_exception_handlers(self, app: FastAPI) -> None:
        register_exception_handlers(app)

    def _configure_routes(self, app: FastAPI) -> None:
        app.include_router(build_api_router(self._settings.ENABLED_SERVICES), prefix=self._settings.API_PREFIX)
        logger.info("Routes configured")

    def _configure_health_endpoint(self, app: FastAPI) -> None:
        @app.get("/health", tags=["health"])
        async def health_check() -> dict:
            """Service status plus the state of every breaker created so far."""
            container: ServiceContainer = app.state.container
            return {
                "status": "ok",
                "environment": self._settings.ENVIRONMENT,
                "services": self._settings.ENABLED_SERVICES,
                "circuit_breakers": container.breakers.get_all_status(),
            }


def create_app(settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """
    Create FastAPI application using the factory.

    Args:
        settings: Optional settings override
        transport: Optional peer transport override
    """
    return AppFactory(settings, transport=transport).create_app()
