from fastapi import APIRouter

from app.services.ai_completion import ai_enabled

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    return {"status": "healthy", "ai_enabled": ai_enabled()}
