"""Application starter."""

import uvicorn

from guruji.core.config import get_settings
from guruji.core.logging import setup_logger

logger = setup_logger(__name__)

if __name__ == "__main__":
    settings = get_settings()
    logger.info(f"Listening on port {settings.PORT}")
    uvicorn.run(
        "guruji.main:create_application",
        factory=True,
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
