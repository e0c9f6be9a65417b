# reeled/llm/errors.py
from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reeled.llm.types import AttemptRecord


class LLMError(Exception):
    """Base LLM error (wrapped)."""

class LLMRetryableError(LLMError):
    """Transient error: timeouts, 429s, 5xx, network."""

class LLMNonRetryableError(LLMError):
    """Bad request, auth, unsupported parameter, unknown deployment."""


class LLMExhaustedError(LLMError):
    """Every candidate model used up its attempts without producing output."""

    def __init__(self, attempts: tuple[AttemptRecord, ...], trace_id: str):
        self.attempts = attempts
        self.trace_id = trace_id
        models = list(dict.fromkeys(a.model for a in attempts))
        super().__init__(f"All models failed after {len(attempts)} attempts: {', '.join(models)}")

    @property
    def last_error(self) -> str | None:
        return self.attempts[-1].error if self.attempts else None


class LLMCancelledError(asyncio.CancelledError):
    """
    The caller cancelled the invocation.

    Subclasses CancelledError so task cancellation keeps working for callers
    that do not care about the trail.
    """

    def __init__(self, attempts: tuple[AttemptRecord, ...], trace_id: str):
        self.attempts = attempts
        self.trace_id = trace_id
        super().__init__(f"Generation cancelled after {len(attempts)} attempts")
