"""
Request/invocation context helpers.

We keep a small context (request_id, trace_id, model) in ContextVars.
The HTTP middleware sets request_id; the generation invoker binds trace_id
and the model being attempted for the length of the call, so every log line
of one invocation is correlatable even when many invocations run
concurrently on the event loop.

No external dependencies.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional


_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_trace_id: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)
_model: ContextVar[Optional[str]] = ContextVar("model", default=None)


def set_context(
    *,
    request_id: Optional[str] = None,
    trace_id: Optional[str] = None,
    model: Optional[str] = None,
) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if trace_id is not None:
        _trace_id.set(trace_id)
    if model is not None:
        _model.set(model)


@contextmanager
def bound_context(
    *,
    trace_id: Optional[str] = None,
    model: Optional[str] = None,
) -> Iterator[None]:
    """
    Set trace_id/model for the duration of the block, then put back whatever
    the caller had. Must be entered and exited in the same task.
    """
    tokens = []
    if trace_id is not None:
        tokens.append((_trace_id, _trace_id.set(trace_id)))
    if model is not None:
        tokens.append((_model, _model.set(model)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def clear_context() -> None:
    _request_id.set(None)
    _trace_id.set(None)
    _model.set(None)


def get_context() -> Dict[str, Any]:
    ctx: Dict[str, Any] = {}
    rid = _request_id.get()
    tid = _trace_id.get()
    model = _model.get()

    if rid:
        ctx["request_id"] = rid
    if tid:
        ctx["trace_id"] = tid
    if model:
        ctx["model"] = model
    return ctx
