"""API routers for taiosd daemon."""

from .notifications import router as notifications_router
from .status import router as status_router

__all__ = [
    "notifications_router",
    "status_router",
]
