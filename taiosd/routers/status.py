"""Status router for taiosd API.

Provides health check and status information.
"""

import logging
import time
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends

from taios_library import __version__

from ..dependencies import get_event_bus
from ..models import StatusResponse
from ..streaming import EventQueueEmitter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["status"])

# Track daemon start time for uptime calculation
_start_time = time.time()


@router.get("/status", response_model=StatusResponse)
async def get_status(emitter: Annotated[EventQueueEmitter, Depends(get_event_bus)]) -> StatusResponse:
    """Get daemon status.

    Returns:
        Daemon status information including version, uptime, and open streams
    """
    return StatusResponse(
        status="running",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        open_streams=emitter.subscriber_count,
    )


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Simple health status
    """
    return {"status": "healthy"}
