"""Request logging middleware."""

import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log every request with its outcome and duration."""

    async def dispatch(self, request: Request, call_next):
        """Log request details and call next middleware."""
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.error(f"{request.method} {request.url.path} failed after {elapsed_ms:.1f}ms")
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        query = f"?{request.url.query}" if request.url.query else ""
        logger.info(
            f"{request.method} {request.url.path}{query} -> {response.status_code} ({elapsed_ms:.1f}ms)",
            extra={
                "path": str(request.url.path),
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 1)
            }
        )
        return response
