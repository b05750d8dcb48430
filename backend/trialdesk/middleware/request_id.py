# backend/trialdesk/middleware/request_id.py
"""
Request correlation middleware.

Reads or generates ``X-Request-ID``, exposes it on ``request.state`` and to
log records through the request context, and echoes it on the response
together with the handling time.
"""

import logging
import time
from typing import Callable
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.request_context import reset_request_id, set_request_id

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = set_request_id(request_id)
        start_time = time.time()
        try:
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000
            if duration_ms > SLOW_REQUEST_MS:
                logger.warning(
                    f"Slow request: {request.method} {request.url.path} took {duration_ms:.0f}ms"
                )
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time-MS"] = str(int(duration_ms))
            return response
        finally:
            reset_request_id(token)
