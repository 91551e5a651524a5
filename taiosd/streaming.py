"""SSE streaming utilities for taiosd.

Provides the fan-out emitter feeding admin notification streams and the
conversion of stream messages into sse-starlette events.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field

from sse_starlette import ServerSentEvent

from taios_library.models.events import StreamMessage

logger = logging.getLogger(__name__)

# Frames end with a bare LF blank line, matching format_frame()
SSE_SEPARATOR = "\n"


def to_server_sent_event(message: StreamMessage) -> ServerSentEvent:
    """Wrap a stream message as an unnamed SSE event.

    Args:
        message: Message to frame

    Returns:
        ServerSentEvent encoding to ``data: <json>\\n\\n``
    """
    return ServerSentEvent(data=message.to_json(), sep=SSE_SEPARATOR)


@dataclass(eq=False)
class Subscription:
    """One stream's inbox on the emitter.

    ``None`` on the queue tells the reader to finish.
    """

    admin_id: str
    queue: asyncio.Queue[StreamMessage | None]
    dropped: int = field(default=0)

    def accepts(self, audience: Iterable[str] | None) -> bool:
        return audience is None or self.admin_id in audience


class EventQueueEmitter:
    """Emitter that queues stream messages for async consumption.

    Each subscriber gets its own bounded queue so a slow stream never blocks
    publishers or other streams; when a queue is full the message is dropped
    for that subscriber only.
    """

    def __init__(self: "EventQueueEmitter", queue_size: int = 256) -> None:
        self.queue_size = queue_size
        self.subscriptions: list[Subscription] = []

    @property
    def subscriber_count(self: "EventQueueEmitter") -> int:
        return len(self.subscriptions)

    def subscribe(self: "EventQueueEmitter", admin_id: str) -> Subscription:
        """Create new subscriber queue for an admin.

        Args:
            admin_id: Admin the stream belongs to

        Returns:
            Subscription whose queue receives matching messages
        """
        subscription = Subscription(admin_id=admin_id, queue=asyncio.Queue(maxsize=self.queue_size))
        self.subscriptions.append(subscription)
        return subscription

    def emit(self: "EventQueueEmitter", message: StreamMessage, audience: Iterable[str] | None = None) -> int:
        """Queue a message for every subscriber in the audience.

        Args:
            message: Framed message to deliver
            audience: Admin ids to deliver to (None = every subscriber)

        Returns:
            Number of subscribers the message was queued for
        """
        if audience is not None:
            audience = frozenset(audience)

        delivered = 0
        for subscription in list(self.subscriptions):
            if not subscription.accepts(audience):
                continue
            try:
                subscription.queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                subscription.dropped += 1
                logger.warning(
                    f"Stream queue full for admin {subscription.admin_id}, dropped {message.type} "
                    f"({subscription.dropped} dropped so far)"
                )
        return delivered

    def unsubscribe(self: "EventQueueEmitter", subscription: Subscription) -> None:
        """Remove subscriber queue.

        Args:
            subscription: Subscription to remove
        """
        if subscription in self.subscriptions:
            self.subscriptions.remove(subscription)

    def close_all(self: "EventQueueEmitter") -> None:
        """Tell every subscriber to finish and drop all subscriptions."""
        for subscription in self.subscriptions:
            wake(subscription.queue)
        self.subscriptions.clear()


def wake(queue: "asyncio.Queue[StreamMessage | None]") -> None:
    """Discard pending messages and leave the finish marker on a queue."""
    while not queue.empty():
        queue.get_nowait()
    queue.put_nowait(None)
