"""FastAPI dependency injection providers."""

from fastapi import Request

from quantrisk.config import Settings
from quantrisk.web.cache import CacheService


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    return request.app.state.settings


def get_cache(request: Request) -> CacheService:
    """Get cache service from app state."""
    return request.app.state.cache
