"""
Application entry point.

    uvicorn polyclinic.main:app
"""

import logging

from polyclinic.config.settings import get_settings
from polyclinic.core.app_factory import create_app
from polyclinic.core.shared.logger import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

logger = logging.getLogger(__name__)

app = create_app(settings)

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "polyclinic.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
