# reeled/llm/client.py
"""
Resilient generation: primary model first, retries with exponential backoff,
then cascade through the fallback models in order.

The retry/cascade decisions live in `reeled.llm.cascade`; this module only
performs the side effects (model calls, sleeping, logging) and keeps the
attempt trail.
"""
from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from reeled.core.request_context import bound_context
from reeled.llm.cascade import (
    INITIAL_STATE,
    Attempting,
    BackingOff,
    Outcome,
    State,
    Succeeded,
    is_terminal,
    next_state,
)
from reeled.llm.errors import (
    LLMCancelledError,
    LLMExhaustedError,
    LLMNonRetryableError,
    LLMRetryableError,
)
from reeled.llm.policy import FallbackPolicy
from reeled.llm.telemetry import log_attempt, log_backoff, log_outcome, now_ms
from reeled.llm.types import (
    AttemptRecord,
    CallModel,
    GenerationRequest,
    GenerationResult,
    ModelIdentifier,
    ModelOutput,
)

Sleep = Callable[[float], Awaitable[None]]


def _request_for(request: GenerationRequest, policy: FallbackPolicy, candidate: int, model: ModelIdentifier) -> GenerationRequest:
    if candidate > 0 and policy.prompt_transform is not None:
        return policy.prompt_transform(request, model)
    return request


async def _call_once(
    call_model: CallModel,
    model: ModelIdentifier,
    request: GenerationRequest,
    timeout_seconds: float | None,
) -> ModelOutput:
    if timeout_seconds is None:
        return await call_model(model, request)
    try:
        return await asyncio.wait_for(call_model(model, request), timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        raise LLMRetryableError(f"{model} timed out after {timeout_seconds}s") from e

async def invoke(
    request: GenerationRequest,
    policy: FallbackPolicy,
    call_model: CallModel,
    *,
    sleep: Sleep = asyncio.sleep,
) -> GenerationResult:
    """
    Run one generation through the policy's candidates.

    Returns the first successful result. Raises LLMExhaustedError when every
    candidate ran out of attempts, or LLMCancelledError if the surrounding
    task is cancelled during a model call or a backoff wait. Both carry the
    attempt trail recorded so far.

    trace_id and the attempted model are bound to the log context only while
    the invocation runs; the caller's context is restored on return.
    """
    with bound_context(trace_id=request.trace_id):
        return await _run(request, policy, call_model, sleep)


async def _run(
    request: GenerationRequest,
    policy: FallbackPolicy,
    call_model: CallModel,
    sleep: Sleep,
) -> GenerationResult:
    candidates = policy.candidates
    attempts: list[AttemptRecord] = []
    output: ModelOutput | None = None
    state: State = INITIAL_STATE

    try:
        while not is_terminal(state):
            if isinstance(state, BackingOff):
                log_backoff(request, candidates[state.candidate], state.delay)
                await sleep(state.delay)
                state = next_state(state, policy)
                continue

            if not isinstance(state, Attempting):
                # ExhaustedModel: move on to the next candidate, or fail
                state = next_state(state, policy)
                continue

            model = candidates[state.candidate]
            with bound_context(model=model):
                started_ms = now_ms()
                t0 = time.monotonic()
                err: Exception | None = None
                try:
                    try:
                        attempt_req = _request_for(request, policy, state.candidate, model)
                    except Exception as e:
                        # transform failures are not retried
                        raise LLMNonRetryableError(f"prompt transform failed for {model}: {e!r}") from e
                    output = await _call_once(call_model, model, attempt_req, policy.per_attempt_timeout_seconds)
                    if output is None:
                        raise LLMRetryableError(f"{model} returned no output")
                    outcome = Outcome.SUCCESS
                except LLMNonRetryableError as e:
                    err, outcome = e, Outcome.NON_RETRYABLE
                except Exception as e:
                    # anything not explicitly marked non-retryable is worth another try
                    err, outcome = e, Outcome.RETRYABLE

                record = AttemptRecord(
                    model=model,
                    candidate_index=state.candidate,
                    attempt_index=state.attempt,
                    ok=err is None,
                    started_ms=started_ms,
                    duration_ms=int((time.monotonic() - t0) * 1000),
                    error_type=type(err).__name__ if err else None,
                    error=str(err) if err else None,
                    retryable=None if err is None else outcome is Outcome.RETRYABLE,
                )
                attempts.append(record)
                log_attempt(request, record)

            state = next_state(state, policy, outcome)

    except asyncio.CancelledError as e:
        trail = tuple(attempts)
        log_outcome(request, trail, "cancelled")
        raise LLMCancelledError(trail, request.trace_id) from e

    trail = tuple(attempts)
    if isinstance(state, Succeeded) and output is not None:
        winner = candidates[state.candidate]
        log_outcome(request, trail, "ok", model=winner)
        return GenerationResult(output=output, model=winner, attempts=trail, trace_id=request.trace_id)

    log_outcome(request, trail, "exhausted")
    raise LLMExhaustedError(trail, request.trace_id)
