# reeled/routers/llm_health.py
from fastapi import APIRouter, Depends

from reeled.api.deps import get_generation_service
from reeled.llm.policy import ModelFallbackOptions
from reeled.services.generation_service import GenerationService

router = APIRouter(prefix="/api/llm", tags=["llm"])

@router.get("/health")
async def llm_health(svc: GenerationService = Depends(get_generation_service)):
    # primary only, single attempt: this checks the provider, not the cascade
    result = await svc.generate(
        "Reply with the single word: ok",
        max_tokens=16,
        fallback_options=ModelFallbackOptions(primary_model=svc.settings.LLM_PRIMARY_MODEL),
        max_retries_per_model=0,
        purpose="healthcheck",
    )
    return {"ok": True, "model": result.model, "sample": result.output_text[:200]}
