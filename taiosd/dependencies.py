"""Shared dependency factories for FastAPI endpoints."""

from fastapi import Request

from .config.models import Config
from .services.event_bus import get_event_bus

__all__ = ["get_daemon_config", "get_event_bus"]


def get_daemon_config(request: Request) -> Config:
    """Get the configuration the application was created with.

    Returns:
        Config instance
    """
    return request.app.state.config
