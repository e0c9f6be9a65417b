# reeled/llm/router.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from reeled.core.config import Settings
from reeled.llm.providers.azure_openai import AzureOpenAIProvider
from reeled.llm.providers.claude import ClaudeProvider
from reeled.llm.providers.gemini import GeminiProvider
from reeled.llm.types import GenerationRequest, ModelIdentifier, ModelOutput


class Provider(Protocol):
    async def generate(self, model: str, req: GenerationRequest) -> ModelOutput: ...


@dataclass
class ModelRouter:
    """
    Resolves a model identifier to the provider that serves it.

    - "gemini" / "gemini-*"  -> Gemini ("gemini" alone means GEMINI_MODEL)
    - "claude" / "claude-*"  -> Anthropic ("claude" alone means CLAUDE_MODEL)
    - anything else          -> Azure OpenAI deployment

    An instance is a `CallModel`, so it can be handed straight to `invoke`.
    """
    settings: Settings
    gemini: Provider | None = None
    claude: Provider | None = None
    azure_openai: Provider | None = None

    def __post_init__(self) -> None:
        if self.gemini is None:
            self.gemini = GeminiProvider(self.settings)
        if self.claude is None:
            self.claude = ClaudeProvider(self.settings)
        if self.azure_openai is None:
            self.azure_openai = AzureOpenAIProvider(self.settings)

    def resolve(self, model: ModelIdentifier) -> tuple[Provider, str]:
        name = model.strip().lower()
        if name == "gemini":
            return (self.gemini, self.settings.GEMINI_MODEL)
        elif name.startswith("gemini"):
            return (self.gemini, model)
        elif name == "claude":
            return (self.claude, self.settings.CLAUDE_MODEL)
        elif name.startswith("claude"):
            return (self.claude, model)
        else:
            return (self.azure_openai, model)

    async def __call__(self, model: ModelIdentifier, req: GenerationRequest) -> ModelOutput:
        provider, concrete = self.resolve(model)
        return await provider.generate(concrete, req)
