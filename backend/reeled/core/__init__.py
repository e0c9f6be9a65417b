# reeled/core/__init__.py
from reeled.core.errors import AppError
from reeled.core.error_codes import ErrorCode
from reeled.core.error_reasons import ErrorReason

__all__ = ["AppError", "ErrorCode", "ErrorReason"]
