"""
Request logging middleware.

Every request runs under a correlation ID: taken from the caller's
`X-Correlation-ID` or generated, returned on the response and forwarded on
every peer call made while serving it, so one user action can be followed
across services.
"""

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from polyclinic.core.shared.logger import CORRELATION_HEADER, reset_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs request/response pairs and binds the correlation ID.

    Adds `X-Correlation-ID` and, for logged paths, `X-Response-Time-Ms`.
    """

    # Probed by orchestrators; not logged
    QUIET_PATHS: tuple[str, ...] = (
        "/health",
        "/favicon.ico",
    )

    def _is_quiet(self, path: str) -> bool:
        return path.startswith(self.QUIET_PATHS)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex[:8]
        request.state.correlation_id = correlation_id
        token = set_correlation_id(correlation_id)
        try:
            if self._is_quiet(request.url.path):
                response = await call_next(request)
            else:
                response = await self._logged(request, call_next, correlation_id)
        finally:
            reset_correlation_id(token)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    async def _logged(self, request: Request, call_next: Callable[[Request], Any], correlation_id: str) -> Response:
        route = f"{request.method} {request.url.path}"
        caller = request.client.host if request.client else "unknown"
        started = time.perf_counter()
        logger.info(f"[{correlation_id}] --> {route} from {caller}")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"[{correlation_id}] <-- {route} failed after {self._elapsed_ms(started):.2f}ms: {e}")
            raise

        elapsed_ms = self._elapsed_ms(started)
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, f"[{correlation_id}] <-- {route} {response.status_code} in {elapsed_ms:.2f}ms")
        response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"
        return response

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return (time.perf_counter() - started) * 1000
