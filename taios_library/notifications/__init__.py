"""Client side of the admin notification pipeline.

Public Interface:
    - RealTimeNotifications: Store + connection facade used by UI layers
    - ConnectionManager: Reconnecting stream transport
    - NotificationStore: Bounded most-recent-first store
    - build_notification / NOTIFICATION_TEMPLATES: Event kind mapping
    - backoff_delay: Reconnect delay policy
"""

from .client import RealTimeNotifications
from .connection import ConnectionManager
from .connection import backoff_delay
from .mapping import NOTIFICATION_TEMPLATES
from .mapping import NotificationTemplate
from .mapping import build_notification
from .mapping import notification_id
from .store import NotificationStore

__all__ = [
    "RealTimeNotifications",
    "ConnectionManager",
    "NotificationStore",
    "NotificationTemplate",
    "NOTIFICATION_TEMPLATES",
    "backoff_delay",
    "build_notification",
    "notification_id",
]
