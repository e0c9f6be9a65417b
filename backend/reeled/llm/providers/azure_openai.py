# reeled/llm/providers/azure_openai.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from reeled.core.config import Settings
from reeled.llm.errors import LLMNonRetryableError, LLMRetryableError
from reeled.llm.types import GenerationRequest, ModelOutput

# 408 request timeout, 409 conflicting concurrent request, 429 rate limit
RETRYABLE_STATUS = {408, 409, 429}

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


@dataclass
class AzureOpenAIProvider:
    """
    Azure OpenAI chat completions over plain REST (httpx).
    Single-attempt. Retries/backoff/timeouts handled by reeled/llm/client.py.
    """
    settings: Settings
    _client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if not self.settings.AZURE_OPENAI_API_KEY:
            raise LLMNonRetryableError("AZURE_OPENAI_API_KEY is missing")
        if not self.settings.AZURE_OPENAI_ENDPOINT:
            raise LLMNonRetryableError("AZURE_OPENAI_ENDPOINT is missing")
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"api-key": self.settings.AZURE_OPENAI_API_KEY},
                # outer per-attempt timeout is the one that matters
                timeout=httpx.Timeout(None, connect=10.0),
            )
        return self._client

    def deployment_for(self, model: str) -> str:
        return self.settings.AZURE_OPENAI_DEPLOYMENTS.get(model, model)

    def url_for(self, model: str) -> str:
        endpoint = (self.settings.AZURE_OPENAI_ENDPOINT or "").rstrip("/") + "/"
        return (
            f"{endpoint}openai/deployments/{self.deployment_for(model)}/chat/completions"
            f"?api-version={self.settings.AZURE_OPENAI_API_VERSION}"
        )

    async def generate(self, model: str, req: GenerationRequest) -> ModelOutput:
        client = self._get_client()

        body: dict = {
            "messages": [
                {"role": "system", "content": req.system_instruction or DEFAULT_SYSTEM_PROMPT},
                {"role": "user", "content": req.prompt},
            ],
            "temperature": req.temperature,
            "max_tokens": req.max_output_tokens,
        }
        if req.response_mime_type == "application/json":
            body["response_format"] = {"type": "json_object"}

        try:
            resp = await client.post(self.url_for(model), json=body)
        except httpx.TimeoutException as e:
            raise LLMRetryableError(f"Azure OpenAI call timed out: {e}") from e
        except httpx.HTTPError as e:
            raise LLMRetryableError(f"Azure OpenAI http error (retryable): {e}") from e

        if resp.status_code >= 400:
            detail = resp.text[:500]
            if resp.status_code in RETRYABLE_STATUS or resp.status_code >= 500:
                raise LLMRetryableError(f"Azure OpenAI {model} returned {resp.status_code}: {detail}")
            # 401/403 credentials, 404 unknown deployment, 400 bad parameters
            raise LLMNonRetryableError(f"Azure OpenAI {model} returned {resp.status_code}: {detail}")

        data = resp.json()
        choices = data.get("choices") or []
        text = ((choices[0].get("message") or {}).get("content") or "").strip() if choices else ""
        if not text:
            raise LLMRetryableError(f"Azure OpenAI returned empty content for {model}")

        usage = data.get("usage") or {}
        return ModelOutput(
            text=text,
            input_tokens=usage.get("prompt_tokens"),
            output_tokens=usage.get("completion_tokens"),
            raw={"id": data.get("id"), "deployment": self.deployment_for(model)},
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
