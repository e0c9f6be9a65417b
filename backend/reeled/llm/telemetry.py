# reeled/llm/telemetry.py

import logging
import time

from reeled.llm.types import AttemptRecord, GenerationRequest

logger = logging.getLogger("llm")


def now_ms() -> int:
    return int(time.time() * 1000)


def log_attempt(req: GenerationRequest, item: AttemptRecord) -> None:
    level = logging.INFO if item.ok else logging.WARNING
    logger.log(
        level,
        "llm_attempt trace_id=%s purpose=%s model=%s candidate=%s attempt=%s latency_ms=%s ok=%s error=%s retryable=%s",
        req.trace_id,
        req.purpose,
        item.model,
        item.candidate_index,
        item.attempt_index,
        item.duration_ms,
        item.ok,
        item.error_type,
        item.retryable,
    )


def log_backoff(req: GenerationRequest, model: str, delay: float) -> None:
    logger.info("llm_backoff trace_id=%s model=%s delay_s=%.2f", req.trace_id, model, delay)


def log_outcome(req: GenerationRequest, attempts: tuple[AttemptRecord, ...], outcome: str, model: str | None = None) -> None:
    """One line per invocation: which model won (if any) and how many tries it took."""
    total_ms = sum(a.duration_ms for a in attempts)
    if outcome == "ok":
        log = logger.info
    elif outcome == "cancelled":
        log = logger.warning
    else:
        log = logger.error
    log(
        "llm_call trace_id=%s purpose=%s outcome=%s model=%s attempts=%s models_tried=%s latency_ms=%s",
        req.trace_id,
        req.purpose,
        outcome,
        model,
        len(attempts),
        len({a.candidate_index for a in attempts}),
        total_ms,
    )
