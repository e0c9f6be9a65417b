"""
generate.py
- Purpose: API route for resilient content generation (primary model, retries, fallbacks).
- Design: Keep router thin. Delegate the cascade to GenerationService.
  Invalid options are rejected by the request schema (422); LLMExhaustedError
  is rendered by the exception handler (502 + attempt trail).
"""

from fastapi import APIRouter, Depends

from reeled.api.deps import get_generation_service
from reeled.schemas.generation_schema import AttemptOut, GenerateRequestBody, GenerateResponse
from reeled.services.generation_service import GenerationService, simplify_for_fallback

router = APIRouter(prefix="/api", tags=["Generate"])


@router.post("/generate", response_model=GenerateResponse)
async def generate(body: GenerateRequestBody, svc: GenerationService = Depends(get_generation_service)):
    result = await svc.generate(
        body.prompt,
        temperature=body.temperature,
        max_tokens=body.max_tokens,
        system_prompt=body.system_prompt,
        response_mime_type=body.response_mime_type,
        fallback_options=body.fallback_options,
        max_retries_per_model=body.max_retries_per_model,
        prompt_transform=simplify_for_fallback if body.simplify_fallback_prompts else None,
        purpose=body.purpose,
    )

    return GenerateResponse(
        trace_id=result.trace_id,
        model=result.model,
        used_fallback=result.used_fallback,
        output_text=result.output_text,
        input_tokens=result.output.input_tokens,
        output_tokens=result.output.output_tokens,
        attempts=[AttemptOut(**a.to_dict()) for a in result.attempts],
    )
