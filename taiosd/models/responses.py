"""Response models for taiosd API."""

from pydantic import Field

from taios_library.models.base import CamelCaseModel


class PublishEventResponse(CamelCaseModel):
    """Result of publishing a domain event.

    Attributes:
        type: Event kind that was published
        timestamp: Server timestamp stamped onto the stream message
        delivered: Open streams the message was queued for
    """

    type: str = Field(..., description="Event kind")
    timestamp: str = Field(..., description="Server-assigned ISO-8601 timestamp")
    delivered: int = Field(..., ge=0, description="Streams the event was queued for")


class StatusResponse(CamelCaseModel):
    """Daemon status.

    Attributes:
        status: Daemon state
        version: Daemon version
        uptime_seconds: Seconds since the daemon started
        open_streams: Notification streams currently connected
    """

    status: str = Field(..., description="Daemon state")
    version: str = Field(..., description="Daemon version")
    uptime_seconds: float = Field(..., description="Seconds since start")
    open_streams: int = Field(..., description="Connected notification streams")
