"""Logging middleware for request tracking."""
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request id into the log context and times every request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Keep a caller-supplied id so logs can be joined across services
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )

        start_time = time.perf_counter()
        logger.info("request_started")

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                exception=str(exc),
                exception_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return response
