from functools import lru_cache

from reeled.core.config import settings
from reeled.llm.router import ModelRouter
from reeled.services.generation_service import GenerationService


@lru_cache
def get_model_router() -> ModelRouter:
    """
    One router (and so one set of provider SDK clients) per process.
    Routers hold no per-invocation state, so sharing them is safe.
    """
    return ModelRouter(settings)


def get_generation_service() -> GenerationService:
    """
    Service dependency for generation flows.
    Using Depends(get_generation_service) allows swapping in fake models in tests.
    """
    return GenerationService(call_model=get_model_router(), settings=settings)
