"""
Observability middleware and logging setup.

Adds correlation IDs to requests and logs one line per request.
"""

import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("parcel_backend.http")


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the package logger once."""
    root = logging.getLogger("parcel_backend")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        ))
        root.addHandler(handler)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = (time.perf_counter() - start_time) * 1000  # ms
        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Process-Time"] = f"{process_time:.2f}"

        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(process_time, 2),
            "ip": request.client.host if request.client else "unknown"
        }

        # Log level based on status
        if response.status_code >= 500:
            logger.error("%(method)s %(path)s -> %(status_code)s", log_data, extra=log_data)
        elif response.status_code >= 400:
            logger.warning("%(method)s %(path)s -> %(status_code)s", log_data, extra=log_data)
        else:
            logger.info("%(method)s %(path)s -> %(status_code)s", log_data, extra=log_data)

        return response
