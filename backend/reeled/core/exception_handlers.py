"""
exception_handlers.py
- Purpose: Convert AppError, generation failures and generic exceptions into
  consistent API responses.

Also logs errors with request context so failures are diagnosable.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from reeled.core import AppError, ErrorCode, ErrorReason
from reeled.core.errors import bad_gateway
from reeled.llm.errors import LLMExhaustedError

logger = logging.getLogger("reeled.exceptions")


def _request_fields(request: Request) -> dict:
    return {"path": str(getattr(request.url, "path", "")), "method": request.method}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "app_error",
        extra={
            **_request_fields(request),
            "status_code": exc.status_code,
            "code": getattr(exc, "code", None),
            "reason": getattr(exc, "reason", None),
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def llm_exhausted_handler(request: Request, exc: LLMExhaustedError) -> JSONResponse:
    """Every candidate model failed; hand the attempt trail back for diagnostics."""
    err = bad_gateway(
        ErrorReason.ALL_MODELS_FAILED,
        code=ErrorCode.LLM_EXHAUSTED,
        message=str(exc),
        details={
            "trace_id": exc.trace_id,
            "attempts": [a.to_dict() for a in exc.attempts],
        },
    )
    return await app_error_handler(request, err)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", extra=_request_fields(request))
    return JSONResponse(
        status_code=500,
        content={"error": {"code": ErrorCode.INTERNAL_ERROR, "reason": ErrorReason.INTERNAL_ERROR}},
    )
