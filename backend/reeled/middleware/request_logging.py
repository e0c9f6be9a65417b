"""
Request logging + request-id propagation.

Every request gets a request_id (taken from `x-request-id` when the caller
sends one), echoed back on the response and attached to every log line
emitted while the request is handled, including the generation attempts.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from reeled.core.request_context import clear_context, set_context


logger = logging.getLogger("reeled.http")

REQUEST_ID_HEADER = "x-request-id"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        set_context(request_id=rid)

        fields = {"method": request.method, "path": request.url.path}
        t0 = time.monotonic()
        try:
            logger.info("http.request", extra={**fields, "query": str(request.url.query)})
            response: Response = await call_next(request)

            logger.info(
                "http.response",
                extra={
                    **fields,
                    "status_code": response.status_code,
                    "duration_ms": int((time.monotonic() - t0) * 1000),
                },
            )

            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            clear_context()
