# routers/health.py
from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
async def healthcheck():
    return {"status": "ok"}
