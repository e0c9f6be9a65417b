from fastapi import APIRouter

from reeled.core.config import settings

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok", "env": settings.env}
