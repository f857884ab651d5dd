"""
FastAPI middleware for request correlation and logging.
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from geoconvert.core.logging_config import LogContext

logger = logging.getLogger(__name__)


class RequestCorrelationMiddleware(BaseHTTPMiddleware):
    """
    Attach a request ID to every request and response.

    The ID is taken from the incoming header when present, otherwise a
    new UUID is generated. It is stored on ``request.state.request_id``
    and echoed back in the response header.
    """

    def __init__(self, app, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id

        logger.info(f"Request started: {request.method} {request.url.path}")
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"- Error: {type(e).__name__} - Duration: {duration_ms:.2f}ms",
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers[self.header_name] = request_id
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"- Status: {response.status_code} - Duration: {duration_ms:.2f}ms"
        )
        return response


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """
    Add request information to every log record emitted while handling a request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        context = {
            "http_method": request.method,
            "request_path": request.url.path,
        }
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            context["request_id"] = request_id

        with LogContext(**context):
            return await call_next(request)
