"""Health check API endpoints."""

from fastapi import APIRouter, Depends

from guruji.core.config import Settings
from guruji.core.health import get_health_status
from guruji.dependencies import get_app_settings
from guruji.schemas.chat import HealthResponse

router = APIRouter(tags=["Health"], prefix="/api")


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)):
    """
    Health check endpoint.

    Reports process liveness and whether the DeepSeek API key is configured.
    """
    return get_health_status(settings)
