# reeled/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent

class Settings(BaseSettings):
    app_name: str = "ReeledAI"
    env: str = "local"

    # CORS
    CORS_ALLOW_ORIGINS: str | None = None
    CORS_ALLOW_VERCEL_PREVIEWS: bool = False

    # =========================
    # Providers
    # =========================
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-3-pro-preview"

    AZURE_OPENAI_API_KEY: str | None = None
    AZURE_OPENAI_ENDPOINT: str | None = None
    AZURE_OPENAI_API_VERSION: str = "2024-12-01-preview"
    # model identifier -> deployment name; unmapped models use their own name
    AZURE_OPENAI_DEPLOYMENTS: dict[str, str] = {
        "gpt-4o": "gpt-4o-2024-11-20",
    }

    ANTHROPIC_API_KEY: str | None = None
    CLAUDE_MODEL: str = "claude-3-opus-20240229"

    # =========================
    # Generation defaults
    # =========================
    LLM_TEMPERATURE: float = 0.4
    LLM_MAX_OUTPUT_TOKENS: int = 2000

    # Resilience (defaults for FallbackPolicy; callers may override per call)
    LLM_PRIMARY_MODEL: str = "gemini"
    LLM_FALLBACK_MODELS: list[str] = []
    LLM_MAX_RETRIES_PER_MODEL: int = 3
    LLM_BASE_BACKOFF_SECONDS: float = 1.0
    LLM_MAX_BACKOFF_SECONDS: float = 8.0
    LLM_TIMEOUT_SECONDS: float = 60.0

    # Observability
    LLM_LOG_PROMPTS: bool = False  # keep False by default (avoid leaking data)

    model_config = SettingsConfigDict(
        env_file=os.path.join(PROJECT_ROOT, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
