"""
errors.py
- Purpose: AppError used across services/routers for consistent errors.
- Pattern: raise AppError(...) in service/router, handler converts to JSON response.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import status as http_status
from reeled.core.error_codes import ErrorCode
from reeled.core.error_reasons import ErrorReason


def _text(reason) -> str:
    # str() of a str-Enum member is "ErrorReason.X" on newer Pythons
    return reason.value if isinstance(reason, Enum) else str(reason)


@dataclass
class AppError(Exception):
    code: ErrorCode
    reason: str
    status_code: int = http_status.HTTP_400_BAD_REQUEST
    details: dict[str, Any] | None = None
    message: str | None = None  # Optional human-readable message

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": self.code,
                "reason": self.reason,
                "message": self.message if self.message else self.reason,
            }
        }
        if self.details:
            payload["error"]["details"] = self.details
        return payload


# Convenience constructors
def bad_gateway(reason: str = ErrorReason.LLM_FAILED, *, code: ErrorCode = ErrorCode.LLM_EXHAUSTED, details: dict | None = None, message: str | None = None) -> AppError:
    return AppError(code=code, reason=_text(reason), status_code=http_status.HTTP_502_BAD_GATEWAY, details=details, message=message)
