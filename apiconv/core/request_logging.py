from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("apiconv.request")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One line per request: method, path, status, duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = response.status_code if response is not None else 500
            log = logger.warning if status_code >= 500 else logger.info
            log("%s %s -> %s (%.1fms)", request.method, request.url.path, status_code, duration_ms)
