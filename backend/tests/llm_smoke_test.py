import asyncio

from reeled.core.config import settings
from reeled.llm.policy import ModelFallbackOptions
from reeled.llm.router import ModelRouter
from reeled.services.generation_service import GenerationService

# Live call against the configured providers. Run by hand:
#   python -m tests.llm_smoke_test   (from backend/)
# conftest.py keeps pytest from importing it.


async def main():
    svc = GenerationService(ModelRouter(settings), settings)
    result = await svc.generate(
        'Return JSON {"ok": true}',
        response_mime_type="application/json",
        fallback_options=ModelFallbackOptions(use_gemini_only=False, use_gpt41=True),
        purpose="smoke_test",
    )
    print(result.model, result.output_text)
    for attempt in result.attempts:
        print(attempt)


if __name__ == "__main__":
    asyncio.run(main())
