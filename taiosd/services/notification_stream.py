"""Per-connection admin notification stream.

One ``AdminNotificationStream`` exists per connected admin. It subscribes to
the event bus, runs the heartbeat timer and yields messages in write order.

Lifecycle:
- open(): subscribe and start the heartbeat task
- messages(): connection_established first, then heartbeats and events
- close(): stop the heartbeat, unsubscribe and end messages(); runs once
  no matter how many of abort, write failure or shutdown trigger it
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from taios_library.models.events import StreamMessage
from taios_library.streaming.framing import connection_established
from taios_library.streaming.framing import heartbeat
from taiosd.streaming import EventQueueEmitter
from taiosd.streaming import Subscription
from taiosd.streaming import wake

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL = 30.0


class AdminNotificationStream:
    """Message source for one admin's SSE connection."""

    def __init__(
        self,
        admin_id: str,
        emitter: EventQueueEmitter,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
    ) -> None:
        """Initialize stream.

        Args:
            admin_id: Admin the connection belongs to
            emitter: Event bus to subscribe to
            heartbeat_interval: Seconds between heartbeat messages
        """
        if heartbeat_interval <= 0:
            raise ValueError("heartbeat_interval must be positive")

        self.admin_id = admin_id
        self.heartbeat_interval = heartbeat_interval
        self._emitter = emitter
        self._subscription: Subscription | None = None
        self._heartbeat_task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def heartbeat_task(self) -> asyncio.Task[None] | None:
        return self._heartbeat_task

    def open(self) -> None:
        """Subscribe to the bus and start the heartbeat timer.

        Raises:
            RuntimeError: If the stream was already opened or closed
        """
        if self._subscription is not None or self._closed:
            raise RuntimeError(f"Notification stream for {self.admin_id} cannot be reopened")

        self._subscription = self._emitter.subscribe(self.admin_id)
        self._heartbeat_task = asyncio.create_task(
            self._heartbeat_loop(),
            name=f"heartbeat:{self.admin_id}",
        )
        logger.info(f"Notification stream connected for {self.admin_id}")

    async def messages(self) -> AsyncIterator[StreamMessage]:
        """Yield messages in the order they should be written.

        Ends when the stream is closed.
        """
        if self._subscription is None:
            raise RuntimeError("Notification stream is not open")

        yield connection_established()

        queue = self._subscription.queue
        while not self._closed:
            message = await queue.get()
            if message is None:
                break
            yield message

    def close(self) -> None:
        """Tear down the stream. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True

        task = self._heartbeat_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

        if self._subscription is not None:
            self._emitter.unsubscribe(self._subscription)
            wake(self._subscription.queue)

        logger.info(f"Notification stream closed for {self.admin_id}")

    async def _heartbeat_loop(self) -> None:
        while not self._closed:
            await asyncio.sleep(self.heartbeat_interval)
            if self._closed or self._subscription is None:
                return

            try:
                self._subscription.queue.put_nowait(heartbeat())
            except asyncio.QueueFull:
                # The connection is not draining; treat as a failed write
                logger.warning(f"Heartbeat write failed for {self.admin_id}, closing stream")
                self.close()
                return
