# reeled/llm/providers/claude.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import anthropic

from reeled.core.config import Settings
from reeled.llm.errors import LLMNonRetryableError, LLMRetryableError
from reeled.llm.types import GenerationRequest, ModelOutput


@dataclass
class ClaudeProvider:
    """
    Anthropic messages API (AsyncAnthropic).
    Single-attempt: the SDK's own retries are turned off so client.py owns
    the retry budget.
    """
    settings: Settings
    _client: Optional[anthropic.AsyncAnthropic] = None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if not self.settings.ANTHROPIC_API_KEY:
            raise LLMNonRetryableError("ANTHROPIC_API_KEY is missing")
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.settings.ANTHROPIC_API_KEY, max_retries=0)
        return self._client

    async def generate(self, model: str, req: GenerationRequest) -> ModelOutput:
        client = self._get_client()

        kwargs: dict = {
            "model": model,
            "max_tokens": req.max_output_tokens,
            "temperature": req.temperature,
            "messages": [{"role": "user", "content": req.prompt}],
        }
        if req.system_instruction:
            kwargs["system"] = req.system_instruction

        try:
            resp = await client.messages.create(**kwargs)
        except (anthropic.APITimeoutError, anthropic.APIConnectionError) as e:
            raise LLMRetryableError(f"Claude connection/timeout error: {e}") from e
        except anthropic.RateLimitError as e:
            raise LLMRetryableError(f"Claude rate limited: {e}") from e
        except anthropic.APIStatusError as e:
            if e.status_code >= 500:
                raise LLMRetryableError(f"Claude server error {e.status_code}: {e}") from e
            raise LLMNonRetryableError(f"Claude request rejected {e.status_code}: {e}") from e

        text = "".join(
            getattr(block, "text", "") for block in resp.content if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise LLMRetryableError(f"Claude returned empty content for {model}")

        usage = getattr(resp, "usage", None)
        return ModelOutput(
            text=text,
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
            raw={"id": getattr(resp, "id", None), "stop_reason": getattr(resp, "stop_reason", None)},
        )
