"""Service layer for taiosd daemon."""

from .event_bus import AdminEventBus
from .event_bus import get_event_bus
from .event_bus import publish_event
from .notification_stream import AdminNotificationStream

__all__ = [
    "AdminEventBus",
    "AdminNotificationStream",
    "get_event_bus",
    "publish_event",
]
