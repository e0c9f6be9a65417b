from fastapi import APIRouter

from reeled.core.config import settings

router = APIRouter(prefix="/api", tags=["Root"])

@router.get("/")
def root():
    return {"message": f"{settings.app_name} generation backend running", "docs": "/docs"}
