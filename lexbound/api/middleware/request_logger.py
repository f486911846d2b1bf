"""Request logging middleware for request timing and generation status."""

import time
import logging
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from lexbound.lib.logger import log_fields

logger = logging.getLogger(__name__)


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """Log request latency and the generation outcome headers."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Log request details and timing.

        Args:
            request: FastAPI request
            call_next: Next middleware/handler

        Returns:
            Response object
        """
        start_time = time.time()
        request_id = request.headers.get("X-Request-ID", f"req-{int(start_time * 1000)}")

        logger.info(
            f"→ {request.method} {request.url.path} "
            f"[{request_id}] from {request.client.host if request.client else 'unknown'}"
        )

        try:
            response = await call_next(request)

            latency_ms = (time.time() - start_time) * 1000
            status_info = response.headers.get("X-Generation-Status", "")
            iterations_info = response.headers.get("X-Iterations", "")

            logger.info(
                f"← {request.method} {request.url.path} "
                f"[{request_id}] {response.status_code} "
                f"in {latency_ms:.0f}ms",
                extra=log_fields(
                    request_id=request_id,
                    path=request.url.path,
                    status_code=response.status_code,
                    latency_ms=round(latency_ms, 2),
                    generation_status=status_info or None,
                    iterations=int(iterations_info) if iterations_info else None,
                ),
            )

            response.headers["X-Response-Time"] = f"{latency_ms:.2f}ms"
            response.headers["X-Request-ID"] = request_id

            return response

        except Exception as e:
            latency_ms = (time.time() - start_time) * 1000
            logger.error(
                f"✗ {request.method} {request.url.path} "
                f"[{request_id}] ERROR in {latency_ms:.0f}ms: {str(e)}"
            )
            raise
