# reeled/core/error_codes.py
from enum import Enum

class ErrorCode(str, Enum):
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Generation
    LLM_EXHAUSTED = "LLM_EXHAUSTED"
