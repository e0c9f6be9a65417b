# reeled/llm/types.py
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable

JsonDict = dict[str, Any]

# Opaque to the invoker; the router decides which provider serves it.
ModelIdentifier = str


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    temperature: float = 0.4
    max_output_tokens: int = 2000
    system_instruction: str | None = None

    # If you want strict JSON outputs for certain calls
    response_mime_type: str | None = None  # e.g. "application/json"

    purpose: str = "generate"               # e.g. "story_bible", "episode"
    trace_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(frozen=True)
class ModelOutput:
    text: str

    # Optional metadata (provider-dependent)
    input_tokens: int | None = None
    output_tokens: int | None = None
    raw: JsonDict | None = None


@dataclass(frozen=True)
class AttemptRecord:
    model: ModelIdentifier
    candidate_index: int
    attempt_index: int
    ok: bool
    started_ms: int
    duration_ms: int
    error_type: str | None = None
    error: str | None = None
    retryable: bool | None = None   # None on success

    def to_dict(self) -> JsonDict:
        return asdict(self)


@dataclass(frozen=True)
class GenerationResult:
    output: ModelOutput
    model: ModelIdentifier          # the model that produced `output`
    attempts: tuple[AttemptRecord, ...]
    trace_id: str

    @property
    def output_text(self) -> str:
        return self.output.text

    @property
    def used_fallback(self) -> bool:
        return self.attempts[-1].candidate_index > 0


CallModel = Callable[[ModelIdentifier, GenerationRequest], Awaitable[ModelOutput]]
PromptTransform = Callable[[GenerationRequest, ModelIdentifier], GenerationRequest]
