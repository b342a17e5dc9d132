"""Health check module for application monitoring."""

from datetime import datetime, timezone

from guruji.core.config import Settings
from guruji.schemas.chat import HealthResponse


def get_health_status(settings: Settings) -> HealthResponse:
    """
    Get health status response.

    Only reports whether upstream credentials are present; the completion
    API itself is never contacted.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=settings.APP_NAME,
        deepseek_api="configured" if settings.api_configured else "missing",
    )
