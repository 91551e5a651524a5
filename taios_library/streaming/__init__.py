"""Framing primitives shared by the stream server and the notification client."""

from .decoder import SSEDecoder
from .decoder import SSEEvent
from .framing import CONNECTED_MESSAGE
from .framing import connection_established
from .framing import format_frame
from .framing import heartbeat
from .framing import iso_timestamp

__all__ = [
    "CONNECTED_MESSAGE",
    "SSEDecoder",
    "SSEEvent",
    "connection_established",
    "format_frame",
    "heartbeat",
    "iso_timestamp",
]
