"""Provider adapters: single attempt, failures classified for the retry loop."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from reeled.core.config import Settings
from reeled.llm.errors import LLMNonRetryableError, LLMRetryableError
from reeled.llm.providers.azure_openai import AzureOpenAIProvider
from reeled.llm.providers.claude import ClaudeProvider
from reeled.llm.providers.gemini import GeminiProvider
from reeled.llm.types import GenerationRequest


def _req(**kwargs):
    return GenerationRequest(prompt="Pitch the season arc.", **kwargs)


# ── Azure OpenAI ─────────────────────────────────────────────────────

def _azure(handler, **overrides):
    settings = Settings(
        AZURE_OPENAI_API_KEY="azure-key",
        AZURE_OPENAI_ENDPOINT="https://reeled.openai.azure.com",
        AZURE_OPENAI_API_VERSION="2024-12-01-preview",
        AZURE_OPENAI_DEPLOYMENTS={"gpt-4o": "gpt-4o-2024-11-20"},
        **overrides,
    )
    provider = AzureOpenAIProvider(settings)
    provider._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return provider


@pytest.mark.asyncio
async def test_azure_posts_chat_completion_to_mapped_deployment():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "id": "chatcmpl-1",
            "choices": [{"message": {"content": " Season one follows Mara. "}}],
            "usage": {"prompt_tokens": 12, "completion_tokens": 30},
        })

    provider = _azure(handler)
    out = await provider.generate("gpt-4o", _req(system_instruction="You are a showrunner.", max_output_tokens=900))

    assert "/openai/deployments/gpt-4o-2024-11-20/chat/completions" in seen["url"]
    assert "api-version=2024-12-01-preview" in seen["url"]
    assert seen["body"]["messages"][0] == {"role": "system", "content": "You are a showrunner."}
    assert seen["body"]["max_tokens"] == 900
    assert out.text == "Season one follows Mara."
    assert out.input_tokens == 12
    assert out.output_tokens == 30


def test_azure_unmapped_model_uses_its_name_as_deployment():
    provider = _azure(lambda r: httpx.Response(200))
    assert provider.deployment_for("gpt-4.1") == "gpt-4.1"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [408, 429, 500, 503])
async def test_azure_transient_status_is_retryable(status):
    provider = _azure(lambda r: httpx.Response(status, json={"error": "busy"}))
    with pytest.raises(LLMRetryableError):
        await provider.generate("gpt-4.1", _req())


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 403, 404])
async def test_azure_client_errors_are_not_retryable(status):
    provider = _azure(lambda r: httpx.Response(status, json={"error": "nope"}))
    with pytest.raises(LLMNonRetryableError):
        await provider.generate("gpt-4.1", _req())


@pytest.mark.asyncio
async def test_azure_network_error_is_retryable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(LLMRetryableError):
        await _azure(handler).generate("gpt-4.1", _req())


@pytest.mark.asyncio
async def test_azure_missing_key_is_not_retryable():
    provider = AzureOpenAIProvider(Settings(AZURE_OPENAI_API_KEY=None, AZURE_OPENAI_ENDPOINT="https://x"))
    with pytest.raises(LLMNonRetryableError):
        await provider.generate("gpt-4.1", _req())


# ── Gemini ───────────────────────────────────────────────────────────

def _gemini(generate_content: AsyncMock) -> GeminiProvider:
    provider = GeminiProvider(Settings(GEMINI_API_KEY="gemini-key"))
    client = MagicMock()
    client.aio.models.generate_content = generate_content
    provider._client = client
    return provider


@pytest.mark.asyncio
async def test_gemini_returns_text_and_usage():
    resp = SimpleNamespace(
        text="  Logline: a heist on the moon.  ",
        usage_metadata=SimpleNamespace(prompt_token_count=9, candidates_token_count=14),
    )
    call = AsyncMock(return_value=resp)

    out = await _gemini(call).generate("gemini-2.5-pro", _req(temperature=0.7))

    assert out.text == "Logline: a heist on the moon."
    assert out.input_tokens == 9
    assert out.output_tokens == 14
    assert call.await_args.kwargs["model"] == "gemini-2.5-pro"
    assert call.await_args.kwargs["config"].temperature == 0.7


@pytest.mark.asyncio
@pytest.mark.parametrize("message", ["429 RESOURCE_EXHAUSTED", "503 UNAVAILABLE: model overloaded"])
async def test_gemini_transient_errors_are_retryable(message):
    with pytest.raises(LLMRetryableError):
        await _gemini(AsyncMock(side_effect=Exception(message))).generate("gemini-2.5-pro", _req())


@pytest.mark.asyncio
async def test_gemini_invalid_argument_is_not_retryable():
    call = AsyncMock(side_effect=Exception("400 INVALID_ARGUMENT: bad field"))
    with pytest.raises(LLMNonRetryableError):
        await _gemini(call).generate("gemini-2.5-pro", _req())


@pytest.mark.asyncio
async def test_gemini_empty_response_is_retryable():
    call = AsyncMock(return_value=SimpleNamespace(text=None, usage_metadata=None))
    with pytest.raises(LLMRetryableError):
        await _gemini(call).generate("gemini-2.5-pro", _req())


@pytest.mark.asyncio
async def test_gemini_missing_key_is_not_retryable():
    provider = GeminiProvider(Settings(GEMINI_API_KEY=None))
    with pytest.raises(LLMNonRetryableError):
        await provider.generate("gemini-2.5-pro", _req())


# ── Claude ───────────────────────────────────────────────────────────

_ANTHROPIC_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _claude(create: AsyncMock) -> ClaudeProvider:
    provider = ClaudeProvider(Settings(ANTHROPIC_API_KEY="anthropic-key"))
    client = MagicMock()
    client.messages.create = create
    provider._client = client
    return provider


@pytest.mark.asyncio
async def test_claude_joins_text_blocks_and_passes_system():
    resp = SimpleNamespace(
        id="msg_1",
        stop_reason="end_turn",
        content=[
            SimpleNamespace(type="text", text="FADE IN:"),
            SimpleNamespace(type="text", text=" EXT. HARBOR - DAWN"),
        ],
        usage=SimpleNamespace(input_tokens=5, output_tokens=7),
    )
    create = AsyncMock(return_value=resp)

    out = await _claude(create).generate("claude-3-opus-20240229", _req(system_instruction="Screenplay format."))

    assert out.text == "FADE IN: EXT. HARBOR - DAWN"
    assert out.output_tokens == 7
    assert create.await_args.kwargs["system"] == "Screenplay format."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        anthropic.RateLimitError("slow down", response=httpx.Response(429, request=_ANTHROPIC_REQUEST), body=None),
        anthropic.InternalServerError("boom", response=httpx.Response(500, request=_ANTHROPIC_REQUEST), body=None),
        anthropic.APIConnectionError(request=_ANTHROPIC_REQUEST),
    ],
)
async def test_claude_transient_errors_are_retryable(error):
    with pytest.raises(LLMRetryableError):
        await _claude(AsyncMock(side_effect=error)).generate("claude-3-opus-20240229", _req())


@pytest.mark.asyncio
async def test_claude_bad_request_is_not_retryable():
    error = anthropic.BadRequestError("max_tokens too large", response=httpx.Response(400, request=_ANTHROPIC_REQUEST), body=None)
    with pytest.raises(LLMNonRetryableError):
        await _claude(AsyncMock(side_effect=error)).generate("claude-3-opus-20240229", _req())
