# reeled/llm/policy.py
"""
Fallback policy: which models to try, in what order, and how hard.

A policy is built per invocation and passed in explicitly. Nothing here is
module-level mutable state, so concurrent generations with different
policies cannot see each other's settings.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace

from pydantic import BaseModel, Field

from reeled.core.config import Settings
from reeled.llm.types import ModelIdentifier, PromptTransform

GPT_41 = "gpt-4.1"
GPT_4 = "gpt-4"
GPT_35_TURBO = "gpt-3.5-turbo"
CLAUDE = "claude"


@dataclass(frozen=True)
class FallbackPolicy:
    primary_model: ModelIdentifier
    fallback_models: tuple[ModelIdentifier, ...] = ()
    max_retries_per_model: int = 3
    base_backoff_seconds: float = 1.0
    max_backoff_seconds: float = 8.0
    per_attempt_timeout_seconds: float | None = 60.0

    # Applied to the request for every candidate except the primary.
    prompt_transform: PromptTransform | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.primary_model:
            raise ValueError("primary_model is required")
        if self.max_retries_per_model < 0:
            raise ValueError("max_retries_per_model must be >= 0")
        if self.base_backoff_seconds < 0 or self.max_backoff_seconds < 0:
            raise ValueError("backoff delays must be >= 0")
        if self.per_attempt_timeout_seconds is not None and self.per_attempt_timeout_seconds <= 0:
            raise ValueError("per_attempt_timeout_seconds must be > 0")
        # accept lists from callers, keep the dataclass hashable
        object.__setattr__(self, "fallback_models", tuple(self.fallback_models))

    @property
    def candidates(self) -> tuple[ModelIdentifier, ...]:
        return (self.primary_model, *self.fallback_models)

    @property
    def attempts_per_model(self) -> int:
        # 0 retries still means one attempt
        return max(1, self.max_retries_per_model)

    def backoff_delay(self, attempt_index: int) -> float:
        """Delay after the failed attempt `attempt_index` (0-based)."""
        return min(self.base_backoff_seconds * (2 ** attempt_index), self.max_backoff_seconds)


class ModelFallbackOptions(BaseModel):
    """
    Caller-facing switches for which fallbacks to enable.

    Defaults to a Gemini-only policy: the primary is retried, nothing else is
    tried.
    """
    primary_model: str = Field(default="gemini", min_length=1)
    use_gpt41: bool = False
    use_gpt4: bool = False
    use_gpt35_turbo: bool = False
    use_claude: bool = False
    custom_fallbacks: list[str] = Field(default_factory=list)
    use_gemini_only: bool = True

    def fallback_models(self) -> list[str]:
        if self.use_gemini_only:
            return []

        # custom fallbacks first, then the standard ones in fixed order
        models: list[str] = list(self.custom_fallbacks)
        for enabled, model in (
            (self.use_gpt41, GPT_41),
            (self.use_gpt4, GPT_4),
            (self.use_gpt35_turbo, GPT_35_TURBO),
            (self.use_claude, CLAUDE),
        ):
            if enabled and model != self.primary_model:
                models.append(model)
        return models


def default_policy(settings: Settings) -> FallbackPolicy:
    return FallbackPolicy(
        primary_model=settings.LLM_PRIMARY_MODEL,
        fallback_models=tuple(settings.LLM_FALLBACK_MODELS),
        max_retries_per_model=settings.LLM_MAX_RETRIES_PER_MODEL,
        base_backoff_seconds=settings.LLM_BASE_BACKOFF_SECONDS,
        max_backoff_seconds=settings.LLM_MAX_BACKOFF_SECONDS,
        per_attempt_timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
    )


def build_policy(
    options: ModelFallbackOptions | None,
    settings: Settings,
    *,
    max_retries_per_model: int | None = None,
    prompt_transform: PromptTransform | None = None,
) -> FallbackPolicy:
    """Turn fallback switches into a policy, filling the rest from settings."""
    overrides: dict = {"prompt_transform": prompt_transform}
    if options is not None:
        overrides["primary_model"] = options.primary_model
        overrides["fallback_models"] = tuple(options.fallback_models())
    if max_retries_per_model is not None:
        overrides["max_retries_per_model"] = max_retries_per_model
    return replace(default_policy(settings), **overrides)
