"""
error_reasons.py
- Purpose: Human-friendly "reason" strings.
- Keep these stable; they may be surfaced in the workspace UI.
"""

from enum import Enum


class ErrorReason(str, Enum):
    LLM_FAILED = "LLM request failed"
    ALL_MODELS_FAILED = "All models failed"
    INTERNAL_ERROR = "Internal server error"
