"""Dependency injection functions for the relay service."""

from fastapi import Request

from guruji.core.config import Settings
from guruji.services.relay import RelayService


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_relay_service(request: Request) -> RelayService:
    """Get the relay service built at application startup."""
    return request.app.state.relay_service
