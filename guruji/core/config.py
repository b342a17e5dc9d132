"""Application configuration."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    APP_NAME: str = Field(default="Guruji DeepSeek Backend")
    PORT: int = Field(default=3000, ge=1, le=65535)

    # Upstream completion API settings
    DEEPSEEK_API_KEY: Optional[str] = Field(default=None)
    DEEPSEEK_API_URL: str = Field(default="https://api.deepseek.com/chat/completions")
    DEEPSEEK_MODEL: str = Field(default="deepseek-chat")
    UPSTREAM_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0, le=300)

    # Model settings
    MODEL_MAX_TOKENS: int = Field(default=800, ge=1, le=8192)
    MODEL_TOP_P: float = Field(default=0.95, ge=0, le=1)
    MODEL_FREQUENCY_PENALTY: float = Field(default=0.3, ge=-2, le=2)
    MODEL_PRESENCE_PENALTY: float = Field(default=0.2, ge=-2, le=2)

    # CORS settings
    CORS_ORIGINS: list[str] = Field(default=["http://localhost:3000"])

    # Rate limiting settings
    RATE_LIMIT_WINDOW: int = Field(default=15, ge=1)  # minutes
    RATE_LIMIT_MAX: int = Field(default=100, ge=1)

    # Environment
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")
    DEBUG: bool = Field(default=False)

    @property
    def api_configured(self) -> bool:
        """Whether upstream credentials are present."""
        return bool(self.DEEPSEEK_API_KEY)

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Build the process-wide settings once, at startup."""
    return Settings()
