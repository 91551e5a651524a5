"""Admin notification endpoints.

Provides the long-lived SSE stream consumed by admin notification clients and
the publish endpoint that feeds domain events into it.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi.responses import JSONResponse
from sse_starlette import ServerSentEvent
from sse_starlette.sse import EventSourceResponse

from ..config.models import Config
from ..dependencies import get_daemon_config
from ..dependencies import get_event_bus
from ..models import ErrorResponse
from ..models import PublishEventRequest
from ..models import PublishEventResponse
from ..services.event_bus import publish_event
from ..services.notification_stream import AdminNotificationStream
from ..streaming import SSE_SEPARATOR
from ..streaming import EventQueueEmitter
from ..streaming import to_server_sent_event

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin/notifications", tags=["notifications"])

# sse-starlette writes ": ping" comments on this interval; the stream sends its
# own heartbeat frames, so keep the library ping out of the way
LIBRARY_PING_SECONDS = 24 * 60 * 60

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def event_stream(stream: AdminNotificationStream) -> AsyncIterator[ServerSentEvent]:
    """Open ``stream`` and yield its messages as SSE events.

    Whatever ends the response (client abort, failed write, server shutdown),
    the stream is closed on the way out.

    Args:
        stream: Unopened notification stream

    Yields:
        ServerSentEvent per stream message
    """
    stream.open()
    try:
        async for message in stream.messages():
            yield to_server_sent_event(message)

    except asyncio.CancelledError:
        # Client disconnected (normal)
        logger.info(f"Notification stream disconnected for {stream.admin_id}")
        raise

    finally:
        stream.close()


@router.get("/stream", response_model=None)
async def notification_stream(
    admin_id: Annotated[str, Query(alias="adminId", min_length=1, description="Admin the stream is scoped to")],
    emitter: Annotated[EventQueueEmitter, Depends(get_event_bus)],
    config: Annotated[Config, Depends(get_daemon_config)],
) -> EventSourceResponse | JSONResponse:
    """SSE stream of admin notifications.

    Connection lifecycle:
    - Connect: subscribes to the admin event bus for ``adminId``
    - Every heartbeat interval: writes a heartbeat message
    - Disconnect: heartbeat stopped, subscription removed

    Args:
        admin_id: Admin identifier (``adminId`` query parameter)
        emitter: Admin event bus
        config: Daemon configuration

    Returns:
        SSE EventSourceResponse, or a 500 error if the stream cannot be set up

    Events (unnamed, JSON in ``data``):
        - connection_established: First message
        - heartbeat: Keep-alive
        - user_created, user_updated, role_changed, system_alert,
          audit_event, integration_status: Domain events
    """
    try:
        stream = AdminNotificationStream(
            admin_id=admin_id,
            emitter=emitter,
            heartbeat_interval=config.stream.heartbeat_interval_seconds,
        )
    except Exception as e:
        logger.error(f"Error in notifications stream for {admin_id}: {e}")
        error = ErrorResponse(error="Failed to establish notification stream", detail=str(e))
        return JSONResponse(status_code=500, content=error.model_dump(by_alias=True, exclude_none=True))

    return EventSourceResponse(
        event_stream(stream),
        headers=STREAM_HEADERS,
        ping=LIBRARY_PING_SECONDS,
        sep=SSE_SEPARATOR,
    )


@router.post("/events", status_code=202, response_model=PublishEventResponse)
async def publish_notification_event(
    request: PublishEventRequest,
    emitter: Annotated[EventQueueEmitter, Depends(get_event_bus)],
) -> PublishEventResponse:
    """Publish a domain event to connected admin streams.

    Args:
        request: Domain event; ``type`` selects the payload schema and
            ``audience`` optionally limits which admins receive it
        emitter: Admin event bus

    Returns:
        Publish result with the server timestamp and delivery count
    """
    message, delivered = publish_event(emitter, request.root)
    return PublishEventResponse(type=message.type, timestamp=message.timestamp, delivered=delivered)
