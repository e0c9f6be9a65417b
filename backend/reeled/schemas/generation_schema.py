from pydantic import BaseModel, Field
from typing import List, Optional

from reeled.llm.policy import ModelFallbackOptions


class GenerateRequestBody(BaseModel):
    prompt: str = Field(min_length=1)
    system_prompt: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    response_mime_type: Optional[str] = None
    purpose: str = "generate"

    fallback_options: Optional[ModelFallbackOptions] = None
    max_retries_per_model: Optional[int] = Field(default=None, ge=0, le=10)
    simplify_fallback_prompts: bool = False


class AttemptOut(BaseModel):
    model: str
    candidate_index: int
    attempt_index: int
    ok: bool
    started_ms: int
    duration_ms: int
    error_type: Optional[str] = None
    error: Optional[str] = None
    retryable: Optional[bool] = None


class GenerateResponse(BaseModel):
    trace_id: str
    model: str
    used_fallback: bool
    output_text: str
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    attempts: List[AttemptOut]
