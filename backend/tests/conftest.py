"""Shared fakes: scripted model calls and a sleep that only records delays."""

from __future__ import annotations

import pytest

from reeled.core.config import Settings
from reeled.llm.types import GenerationRequest, ModelOutput

# live-provider script, run by hand only
collect_ignore = ["llm_smoke_test.py"]


class ScriptedModel:
    """
    `call_model` stand-in. Each model gets a list of outcomes consumed in
    order: an exception instance is raised, a string is returned as text,
    None is returned as is.
    """

    def __init__(self, script: dict[str, list]):
        self.script = {model: list(outcomes) for model, outcomes in script.items()}
        self.calls: list[tuple[str, GenerationRequest]] = []

    async def __call__(self, model: str, req: GenerationRequest) -> ModelOutput | None:
        self.calls.append((model, req))
        outcome = self.script[model].pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            return None
        return ModelOutput(text=outcome, input_tokens=11, output_tokens=7)

    @property
    def models_called(self) -> list[str]:
        return [m for m, _ in self.calls]


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def test_settings():
    return Settings(
        LLM_PRIMARY_MODEL="gemini",
        LLM_FALLBACK_MODELS=[],
        LLM_MAX_RETRIES_PER_MODEL=2,
        LLM_BASE_BACKOFF_SECONDS=0.5,
        LLM_MAX_BACKOFF_SECONDS=4.0,
        LLM_TIMEOUT_SECONDS=30.0,
        LLM_TEMPERATURE=0.4,
        LLM_MAX_OUTPUT_TOKENS=2000,
    )
