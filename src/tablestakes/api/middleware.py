"""Middleware for request IDs and HTTP error logging."""

import logging
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tablestakes.core.logging import request_id_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request ID to the logging context and logs error responses.

    - 4xx responses: logged at WARN level
    - 5xx responses: logged at ERROR level
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        token = request_id_context.set(request_id)
        start_time = time.time()

        try:
            response = await call_next(request)

            log_extra = {
                "http_status": response.status_code,
                "method": request.method,
                "path": request.url.path,
                "duration_ms": round((time.time() - start_time) * 1000, 1),
            }
            if 400 <= response.status_code < 500:
                logger.warning("Client error response", extra=log_extra)
            elif response.status_code >= 500:
                logger.error("Server error response", extra=log_extra)

            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_context.reset(token)
