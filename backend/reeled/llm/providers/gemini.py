# reeled/llm/providers/gemini.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx
from google import genai
from google.genai import types

from reeled.core.config import Settings
from reeled.llm.errors import LLMRetryableError, LLMNonRetryableError
from reeled.llm.types import GenerationRequest, ModelOutput

_RETRYABLE_MARKERS = ("429", "rate", "quota", "resource_exhausted", "500", "502", "503", "504", "unavailable", "temporarily", "overloaded")


@dataclass
class GeminiProvider:
    """
    Gemini provider using Google Gen AI SDK (google-genai), async surface.
    Single-attempt. Retries/backoff/timeouts handled by reeled/llm/client.py.
    """
    settings: Settings
    _client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if not self.settings.GEMINI_API_KEY:
            raise LLMNonRetryableError("GEMINI_API_KEY is missing")
        if self._client is None:
            self._client = genai.Client(api_key=self.settings.GEMINI_API_KEY)
        return self._client

    async def generate(self, model: str, req: GenerationRequest) -> ModelOutput:
        client = self._get_client()

        try:
            cfg = types.GenerateContentConfig(
                temperature=req.temperature,
                max_output_tokens=req.max_output_tokens,
                system_instruction=req.system_instruction,
                response_mime_type=req.response_mime_type,
            )

            resp = await client.aio.models.generate_content(
                model=model,
                contents=req.prompt,
                config=cfg,
            )
        # ---- classify retryable failures first (so client.py retries) ----
        except (httpx.TimeoutException, TimeoutError) as e:
            raise LLMRetryableError(f"Gemini call timed out: {e}") from e
        except httpx.HTTPError as e:
            raise LLMRetryableError(f"Gemini http error (retryable): {e}") from e
        except Exception as e:
            msg = str(e).lower()
            if any(x in msg for x in _RETRYABLE_MARKERS):
                raise LLMRetryableError(f"Gemini retryable failure: {e}") from e
            raise LLMNonRetryableError(f"Gemini non-retryable failure: {e}") from e

        text = (getattr(resp, "text", None) or "").strip()
        if not text:
            # blocked or truncated to nothing; another try may well succeed
            raise LLMRetryableError(f"Gemini returned empty content for {model}")

        # Token usage: best-effort, won't break if missing
        usage = getattr(resp, "usage_metadata", None)
        return ModelOutput(
            text=text,
            input_tokens=getattr(usage, "prompt_token_count", None),
            output_tokens=getattr(usage, "candidates_token_count", None),
            raw={"sdk_response_type": type(resp).__name__},
        )
