"""Client-side notification models."""

from enum import Enum
from typing import Any

from pydantic import ConfigDict
from pydantic import Field

from .base import CamelCaseModel


class NotificationType(str, Enum):
    """Severity shown for a notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ConnectionState(str, Enum):
    """Connection lifecycle of a notification client.

    State transitions:
    - DISCONNECTED -> CONNECTING: start() or a scheduled reconnect
    - CONNECTING -> CONNECTED: stream opened
    - CONNECTING/CONNECTED -> ERROR: transport failure or stream closed
    - ERROR -> CONNECTING: after backoff, while attempts remain
    - any -> DISCONNECTED: stop()
    """

    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class AdminNotification(CamelCaseModel):
    """User-facing record materialized from a domain stream message.

    Instances are immutable; read state changes replace the record.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Derived from event kind and server timestamp")
    type: NotificationType
    title: str
    message: str
    created_at: str = Field(..., description="Timestamp of the source stream message")
    is_read: bool = False
    action_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, description="Original event payload")
