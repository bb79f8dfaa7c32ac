"""Request timing and logging middleware."""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

log = logging.getLogger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000
        log.info(
            f"[TIMING] {request.method} {request.url.path} | "
            f"duration={duration_ms:.2f}ms | status={response.status_code}"
        )
        return response
