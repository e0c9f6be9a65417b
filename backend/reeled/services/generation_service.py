# reeled/services/generation_service.py
import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Callable, Optional, TypeVar

from reeled.core.config import Settings
from reeled.llm.client import Sleep, invoke
from reeled.llm.errors import LLMExhaustedError
from reeled.llm.policy import FallbackPolicy, ModelFallbackOptions, build_policy
from reeled.llm.types import (
    CallModel,
    GenerationRequest,
    GenerationResult,
    ModelIdentifier,
    ModelOutput,
    PromptTransform,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fallback models tend to be smaller; keep their output budget modest.
FALLBACK_MAX_OUTPUT_TOKENS = 1500


def simplify_for_fallback(req: GenerationRequest, model: ModelIdentifier) -> GenerationRequest:
    """
    Prompt transform for fallback candidates: drop the system instruction and
    cap the output budget. Opt-in; never applied unless the caller asks.
    """
    return replace(
        req,
        system_instruction=None,
        max_output_tokens=min(req.max_output_tokens, FALLBACK_MAX_OUTPUT_TOKENS),
    )


class GenerationService:
    def __init__(self, call_model: CallModel, settings: Settings, *, sleep: Sleep = asyncio.sleep):
        self.call_model = call_model
        self.settings = settings
        self.sleep = sleep

    def policy_for(
        self,
        fallback_options: Optional[ModelFallbackOptions] = None,
        *,
        max_retries_per_model: Optional[int] = None,
        prompt_transform: Optional[PromptTransform] = None,
    ) -> FallbackPolicy:
        return build_policy(
            fallback_options,
            self.settings,
            max_retries_per_model=max_retries_per_model,
            prompt_transform=prompt_transform,
        )

    async def generate(
        self,
        prompt: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
        response_mime_type: Optional[str] = None,
        fallback_options: Optional[ModelFallbackOptions] = None,
        max_retries_per_model: Optional[int] = None,
        prompt_transform: Optional[PromptTransform] = None,
        purpose: str = "generate",
    ) -> GenerationResult:
        req = GenerationRequest(
            prompt=prompt,
            temperature=self.settings.LLM_TEMPERATURE if temperature is None else temperature,
            max_output_tokens=self.settings.LLM_MAX_OUTPUT_TOKENS if max_tokens is None else max_tokens,
            system_instruction=system_prompt,
            response_mime_type=response_mime_type,
            purpose=purpose,
        )
        policy = self.policy_for(
            fallback_options,
            max_retries_per_model=max_retries_per_model,
            prompt_transform=prompt_transform,
        )
        return await invoke(req, policy, self.call_model, sleep=self.sleep)

    async def generate_content_with_fallback(self, prompt: str, **kwargs) -> str:
        """Text-only convenience over `generate`; raises LLMExhaustedError on failure."""
        result = await self.generate(prompt, **kwargs)
        return result.output_text

    async def retry_with_model_fallback(
        self,
        operation: Callable[[bool, ModelIdentifier], Awaitable[T]],
        operation_name: str,
        policy: FallbackPolicy,
    ) -> Optional[T]:
        """
        Cascade an arbitrary async operation through the policy's models.

        `operation(use_fallback_model, model)` does its own model call (and
        usually its own parsing); `use_fallback_model` is False only for the
        primary. Returns None when every model fails, so callers can skip an
        optional generation step. Cancellation still propagates.
        """
        produced: list[T] = []

        async def call(model: ModelIdentifier, req: GenerationRequest) -> ModelOutput:
            produced.append(await operation(req.purpose != operation_name, model))
            return ModelOutput(text="")

        def mark_fallback(req: GenerationRequest, model: ModelIdentifier) -> GenerationRequest:
            return replace(req, purpose=f"{operation_name}:fallback")

        req = GenerationRequest(prompt="", purpose=operation_name)
        try:
            await invoke(req, replace(policy, prompt_transform=mark_fallback), call, sleep=self.sleep)
        except LLMExhaustedError as e:
            logger.error("%s: all models failed, skipping (%s)", operation_name, e)
            return None
        return produced[-1]
