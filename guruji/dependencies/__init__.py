"""FastAPI dependency injection functions."""

from .get_relay_service import get_app_settings, get_relay_service

__all__ = ["get_app_settings", "get_relay_service"]
