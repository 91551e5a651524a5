"""Wire framing for admin notification streams.

Every frame is ``data: `` followed by one line of JSON and a blank line, the
plain server-sent-events convention understood by any EventSource client.
"""

from datetime import UTC
from datetime import datetime

from taios_library.models.events import StreamMessage
from taios_library.models.events import TransportKind

CONNECTED_MESSAGE = "Real-time notifications connected"


def iso_timestamp(moment: datetime | None = None) -> str:
    """Format a timestamp as UTC ISO-8601 with millisecond precision.

    Args:
        moment: Time to format (default: now)

    Returns:
        Timestamp such as ``2024-01-01T00:00:00.000Z``
    """
    if moment is None:
        moment = datetime.now(UTC)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def connection_established(timestamp: str | None = None) -> StreamMessage:
    """Build the first message written to every new stream."""
    return StreamMessage(
        type=TransportKind.CONNECTION_ESTABLISHED.value,
        timestamp=timestamp or iso_timestamp(),
        message=CONNECTED_MESSAGE,
    )


def heartbeat(timestamp: str | None = None) -> StreamMessage:
    """Build a keep-alive message."""
    return StreamMessage(type=TransportKind.HEARTBEAT.value, timestamp=timestamp or iso_timestamp())


def format_frame(message: StreamMessage) -> str:
    """Format a stream message as a single SSE frame.

    Args:
        message: Message to frame

    Returns:
        SSE formatted string

    Example:
        >>> frame = format_frame(heartbeat("2024-01-01T00:00:00.000Z"))
        >>> frame
        'data: {"type":"heartbeat","timestamp":"2024-01-01T00:00:00.000Z"}\\n\\n'
    """
    return f"data: {message.to_json()}\n\n"
